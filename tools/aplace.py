# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""APLACE command-line utility."""

import argparse
import importlib
import sys
import traceback

# Modules that must be imported dynamically when invoking a tool.
# The keys are the tool names, and the values are the module paths.
# The main function of each module must be called "main" and must
# accept two parameters: prog (str) and args (list[str]).

TOOLS = {
    "gplace": "tools.gplace.gplace",
}


def main() -> None:
    """Main function."""
    parser = argparse.ArgumentParser(prog="aplace")
    parser.add_argument(
        "tool", choices=TOOLS.keys(), nargs=argparse.REMAINDER, help="tool to execute"
    )
    args = parser.parse_args()

    if args.tool:
        tool_name, tool_args = args.tool[0], args.tool[1:]
        if tool_name in TOOLS:
            try:
                importlib.import_module(TOOLS[tool_name]).main(f"aplace {tool_name}", tool_args)
            except Exception as e:
                traceback.print_exc()
                print(f"Error ({tool_name}): {e}")
                sys.exit(1)
        else:
            print("Unknown aplace tool:", tool_name)
            sys.exit(2)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
