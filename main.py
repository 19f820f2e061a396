# Main.py
""""" Entry point for the text calculator.

   Responsibilities:
   - Load configuration and logging level
   - Read instruction blocks from stdin (an empty line runs the block, 'close' ends the program)
   - Print what the evaluator returns; variables are reset after every block

"""""
import logging
import re
import sys

import pyperclip

from TextCalc import config_manager as config_manager
from TextCalc import error as E
from TextCalc.MathEngine import Evaluator, Outcome

logger = logging.getLogger(__name__)

CLOSE_COMMAND = "close"
# "close" as the last word of an instruction line
CLOSE_SUFFIX_RE = re.compile(rf"\b{CLOSE_COMMAND}\s*$", re.IGNORECASE)

# Outcome kinds whose value is worth copying to the clipboard
VALUE_KINDS = (Outcome.ASSIGNMENT, Outcome.QUERY, Outcome.RESULT, Outcome.BASE_RESULT)


def read_blocks(stream):
    """Yield (lines, should_exit) for every block typed into stream."""
    instructions = []
    for raw_line in stream:
        line = raw_line.rstrip("\r\n")

        if line.strip().lower() == CLOSE_COMMAND:
            yield instructions, True
            return

        if not line.strip():
            if instructions:
                yield instructions, False
            instructions = []
            continue

        match = CLOSE_SUFFIX_RE.search(line)
        if match:
            line = line[:match.start()].rstrip()
            if line:
                instructions.append(line)
            yield instructions, True
            return

        instructions.append(line)

    # end of input behaves like a final empty line
    if instructions:
        yield instructions, False


def copy_to_clipboard(text):
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning("Could not copy result to clipboard: %s", e)


def run_block(evaluator, lines, out, settings):
    """Run one block and print its outcomes. Returns the outcomes."""
    try:
        outcomes = evaluator.process_block(lines)
        failure = None
    except E.UnresolvedBlock as e:
        outcomes = e.outcomes
        failure = e

    for outcome in outcomes:
        print(outcome.text, file=out)

    if failure is not None:
        print(E.error_text(failure), file=out)

    values = [outcome for outcome in outcomes if outcome.kind in VALUE_KINDS]
    if values and settings.get("copy_result_to_clipboard"):
        # the value is the last word of "A = 2", "Result: 2", "Result in base 2: 10"
        copy_to_clipboard(values[-1].text.rsplit(" ", 1)[-1])

    return outcomes


def main(stream=None, out=None):

    """
    Load configuration and run the read/eval loop.
    - Keep this thin: no business logic here.
    """

    stream = stream if stream is not None else sys.stdin
    out = out if out is not None else sys.stdout

    all_settings = config_manager.load_setting_value("all")
    logging.basicConfig(level=logging.DEBUG if all_settings.get("debug") else logging.WARNING)
    logger.debug("Config loaded: %s", all_settings)

    print("Text calculator. An empty line runs the block, 'close' ends the program.", file=out)

    evaluator = Evaluator(all_settings)
    for lines, should_exit in read_blocks(stream):
        run_block(evaluator, lines, out, all_settings)
        evaluator.reset()
        print("Variables are reset.", file=out)
        if should_exit:
            break

    print("The program has finished running.", file=out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
