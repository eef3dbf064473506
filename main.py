"""
Tally - Main Entry Point
Integer arithmetic, assignment and print, from the command line
"""

import sys
import argparse
import json
import os
from pathlib import Path
from typing import List, Optional, Sequence

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from ast_nodes import ast_to_dict, pretty_print_ast
from error_handling import TallyError, TokenizerError, describe_error, format_error_report
from interpreter import Interpreter, create_debug_interpreter, create_interpreter
from lexing import tokenize
from parsing import create_parser
from tokens import Token

VERSION = "Tally v1.0.0"
HISTORY_FILE = "~/.tally_history"

DEMO_PROGRAM = """\
sum = 5 - 9;
other = 0 - 6;
print sum;
print other;
print sum - other + (5 + 3);
"""


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='tally',
      description='Tally - integer arithmetic, assignment and print',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.tly               # Run a Tally script
  %(prog)s -e "x = 1 + 2; print x;" # Run inline code
  %(prog)s -i                       # Interactive mode
  %(prog)s --tokens script.tly      # Show the token list
  %(prog)s --parse script.tly       # Show the AST
  %(prog)s --parse --json script.tly
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Tally script file to execute'
  )

  parser.add_argument(
      '-e', '--eval',
      metavar='CODE',
      help='Execute CODE instead of a script file'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode, after running the script or -e code if given'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize and show the tokens instead of running'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse and show the AST instead of running'
  )

  parser.add_argument(
      '--json',
      action='store_true',
      help='With --parse, print the AST as JSON (rejected without --parse)'
  )

  parser.add_argument(
      '--demo',
      action='store_true',
      help='Run the built-in demo program'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace parsing and evaluation on stderr'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_script(script_path: str) -> str:
  """Read a script file, exiting with a hint when it cannot be read"""
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)


def report_error(error: TallyError, source: str, tokens: Sequence[Token] = ()) -> None:
  """Print a located error report"""
  print(format_error_report(describe_error(error, source, tokens)), end='')


def show_tokens(tokens: List[Token]) -> None:
  print(f"{len(tokens)} tokens:")
  for token in tokens:
    print(f"  {token.position:5d}  {token.type.value:<10} {token.text}")


def process_source(source: str, name: str = "<input>", tokens_only: bool = False,
                   parse_only: bool = False, as_json: bool = False, debug: bool = False,
                   interpreter: Optional[Interpreter] = None) -> None:
  """
  Tokenize, parse and (unless asked to stop early) run one program.
  Runs against interpreter when given, so its bindings outlive the program.
  """
  tokens: List[Token] = []
  try:
    tokens = tokenize(source)
    if tokens_only:
      show_tokens(tokens)
      return

    ast = create_parser(tokens, debug).parse_program()
    if debug:
      print(f"Parsed {len(ast.statements)} statements from {name}", file=sys.stderr)
    if parse_only:
      if as_json:
        print(json.dumps(ast_to_dict(ast), indent=2, ensure_ascii=False))
      else:
        print(pretty_print_ast(ast), end='')
      return

    if interpreter is None:
      interpreter = create_debug_interpreter() if debug else create_interpreter()
    bindings = interpreter.interpret(ast)
    if debug:
      print(f"Final bindings: {bindings}", file=sys.stderr)

  except TallyError as e:
    print(f"Error in '{name}':")
    report_error(e, source, tokens)
    sys.exit(1)
  except Exception as e:
    print(f"Unexpected error while executing '{name}': {e}")
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run or unreadable history

  readline.set_history_length(1000)

  completions = ["print", ":env", ":tokens", ":parse", ":reset", ":help", ":quit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :env              - Show current bindings")
  print("  :tokens <code>    - Show tokens for code")
  print("  :parse <code>     - Show AST for code")
  print("  :reset            - Forget all bindings")
  print("  :help             - Show this help")
  print("  :quit             - Exit REPL")
  print()
  print("Language:")
  print("  x = 5 - 9;        - Assignment")
  print("  print x + (1 - 2); - Print a value")


def handle_command(code: str, interpreter) -> None:
  """Run one ':' command of the interactive session"""
  command, _, argument = code.partition(" ")

  if command == ":env":
    if interpreter.bindings:
      for name, value in interpreter.bindings.items():
        print(f"  {name} = {value}")
    else:
      print("  (no bindings)")
  elif command == ":tokens":
    show_tokens(tokenize(argument))
  elif command == ":parse":
    print(pretty_print_ast(create_parser(tokenize(argument)).parse_program()), end='')
  elif command == ":reset":
    interpreter.reset()
    print("Bindings cleared")
  elif command == ":help":
    print_repl_help()
  else:
    print(f"Unknown command {command}, try :help")


def run_interactive_mode(debug: bool = False, interpreter: Optional[Interpreter] = None) -> None:
  """Run Tally in interactive mode; bindings persist for the session"""
  print(f"{VERSION} - Interactive Mode")
  print("Type ':quit' to exit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  if interpreter is None:
    interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input("tally> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if not code:
      continue
    if code == ":quit":
      break

    if code.startswith(":"):
      try:
        handle_command(code, interpreter)
      except TallyError as e:
        report_error(e, "")
      continue

    try:
      interpreter.run(code)
    except TokenizerError as e:
      report_error(e, code)
    except TallyError as e:
      report_error(e, code, tokenize(code))


def main(argv: Optional[Sequence[str]] = None) -> None:
  """Main entry point for Tally"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.json and not args.parse:
    arg_parser.error("--json only applies together with --parse")

  # With -i the program runs in the session interpreter, so the REPL starts
  # with its bindings
  session = None
  if args.interactive:
    session = create_debug_interpreter() if args.debug else create_interpreter()

  options = dict(tokens_only=args.tokens, parse_only=args.parse, as_json=args.json,
                 debug=args.debug, interpreter=session)

  has_program = True
  if args.eval is not None:
    process_source(args.eval, "<eval>", **options)
  elif args.script:
    process_source(read_script(args.script), args.script, **options)
  elif args.demo:
    process_source(DEMO_PROGRAM, "<demo>", **options)
  else:
    has_program = False

  if args.interactive or not has_program:
    run_interactive_mode(debug=args.debug, interpreter=session)


if __name__ == "__main__":
  main()
