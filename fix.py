import sys
import argparse

from termcolor import cprint

import fix_ops
import fix_eval
import fix_repl


def run(table=fix_ops.PRELUDE, **options):
    cprint(
        f"\nPython    : {sys.version}\nOperators : {len(table)} registered\n",
        color="magenta",
    )
    fix_repl.run(table, **options)


def load_table(paths, prelude=True) -> fix_ops.OperatorTable:
    """ Accumulate operator files on top of each other, later files overriding earlier ones. """
    table = fix_ops.PRELUDE if prelude else fix_ops.OperatorTable()
    for path in paths:
        table = fix_ops.OperatorTable.from_json(path, base=table)
    return table


def main(argv=None):
    parser = argparse.ArgumentParser(description="Resolve user-defined infix operators.")
    parser.add_argument("expression", type=str, nargs="?")
    parser.add_argument("--operators", "-ops", action="append", default=[], metavar="FILE")
    parser.add_argument("--no-prelude", action="store_true")
    parser.add_argument("--tags", action="store_true", help="only tag operators")
    parser.add_argument("--render", action="store_true", help="render without evaluating")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    try:
        table = load_table(args.operators, prelude=not args.no_prelude)
    except FileNotFoundError as err:
        fix_repl.errprint(f"File not found: '{err.filename}'")
        return 1
    except (ValueError, fix_ops.RegistryError) as err:
        fix_repl.errprint(f"RegistryError: {str(err)}")
        return 1

    options = {"tagonly": args.tags, "renderonly": args.render, "verbose": args.verbose}
    if args.expression is None:
        run(table, **options)
    else:
        fix_repl.print_eval(fix_eval.FixityCodeEvaluator(table), args.expression, options)
    return 0


if __name__ == "__main__":
    sys.exit(main())
