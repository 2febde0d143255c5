import sys

import colorama

from termcolor import cprint, colored

import fix_ops
import fix_eval
import fix_lexer
import fix_parser
import fix_render

colorama.init()


USAGE = """
USAGE: Type an expression or enter one the following special commands:

    .exit or exit : Stop and exit the program.
    .operators    : List the registered operators, in the order they are scanned for.
    .help or help : Show this message.
    .options      : Print the actual options settings.
    .reset        : Go back to the operator table the REPL started with.
    .<file>       : Register the operators in the given .json file.
    .<option>     : Toggle the given option on/off.
"""


def errprint(msg):
    cprint(msg, color="red", file=sys.stderr)


def print_eval(e, code, options=None):
    """ Evaluate the given code with `e` using the given `options` and print the results. """
    options = options or {}
    try:
        result = e._evaluate(code, **options)
        cprint(result.value if isinstance(result.value, str) else repr(result.value), color="green")

        if options.get("verbose"):
            print()
            cprint(result.tagged, color="green")
            print()
            cprint(result.rendered, color="magenta")
            print()

    except fix_lexer.LexError as err:
        errprint(f"LexError: {str(err)}")

    except fix_parser.ResolveError as err:
        errprint(f"{type(err).__name__}: {str(err)}")

    except fix_render.UnresolvedFunctionReference as err:
        errprint(f"UnresolvedFunctionReference: {str(err)}")

    except fix_eval.EvaluationError as err:
        errprint(f"EvaluationError: {str(err)}")

    except Exception as err:
        errprint(str(type(err)) + ": " + str(err))
        print(" Aborting... ")
        raise


def print_operators(table):
    for op in table.priority_order():
        cprint(
            "{:>4} {:<6} {:>3}  {}{}".format(
                op.symbol,
                op.fixity.name.lower(),
                op.precedence,
                op.function,
                colored(" (flipped)", color="cyan") if op.flip else "",
            ),
            color="yellow",
        )


def load_operators(e, path):
    try:
        e.reset(fix_ops.OperatorTable.from_json(path, base=e.table))
        cprint(f"Registered operators from '{path}'", color="yellow")
    except FileNotFoundError:
        errprint(f"File not found: '{path}'")
    except (ValueError, fix_ops.RegistryError) as err:
        errprint(f"RegistryError: {str(err)}")


def run_repl_command(e, command, options, initial_table):
    if command in options:
        options[command] = not options[command]  # toggle option
        print(command, "=", options[command])
    elif command in ["operators"]:
        print_operators(e.table)
    elif command in ["help", "?", ""]:
        print(USAGE)
    elif command in ["options"]:
        print(options)
    elif command in ["quit", "exit", "stop"]:
        sys.exit()
    elif command in ["reset"]:
        e.reset(initial_table)
    else:
        # Here the command should be a filename
        load_operators(e, command)


def run_command(e, command, options, initial_table):
    print(colorama.Fore.YELLOW, end="")
    if not command:
        pass
    elif command in ["help", "quit", "exit", "stop"]:
        run_repl_command(e, command, options, initial_table)
    elif command[0] == ".":
        run_repl_command(e, command[1:], options, initial_table)
    else:
        # `command` is an expression, so resolve and evaluate it
        print_eval(e, command, options)
    print(colorama.Style.RESET_ALL, end="")


def run(table=fix_ops.PRELUDE, tagonly=False, renderonly=False, verbose=False):
    options = {"tagonly": tagonly, "renderonly": renderonly, "verbose": verbose}
    e = fix_eval.FixityCodeEvaluator(table)

    # Enter a REPL loop
    cprint("Type help or an expression to be resolved", color="green")
    command = ""
    while True:
        try:
            run_command(e, command, options, table)
            print("F> ", end="")
            command = input().strip()
        except (KeyboardInterrupt, EOFError):
            sys.exit()


if __name__ == "__main__":
    import fix

    fix.run()
