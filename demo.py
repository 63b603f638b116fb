import time
import sys
import os
import itertools

# Ensure we can import cpbar if running from source
sys.path.insert(0, os.path.abspath("src"))

from cpbar import ProgressBar, progress_bar


def expensive_operation(element):
    time.sleep(0.05)


def run_demo():
    print("\n\033[1mcpbar Demo\033[0m - Console Progress Bar\n")

    print("Unbounded (unknown total):")
    for element in ProgressBar(itertools.islice(itertools.count(), 40)):
        expensive_operation(element)

    print("Bounded, small total (one glyph per item):")
    for element in ProgressBar(list(range(20))).with_bounds():
        expensive_operation(element)

    print("Bounded, scaled to 30 columns, custom delimiters:")
    for element in ProgressBar(range(80)).with_bounds().with_delims(('<', '>')):
        expensive_operation(element)

    print("Picked automatically:")
    for element in progress_bar("progress"):
        expensive_operation(element)


if __name__ == "__main__":
    try:
        run_demo()
    except KeyboardInterrupt:
        sys.stdout.write("\n")
        print("Demo cancelled.")
