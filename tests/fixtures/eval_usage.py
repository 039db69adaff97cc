"""
Test fixture: eval() and exec() calls
Should trigger 2 no-eval messages
"""


def compute(expression: str):
    return eval(expression)


def run(snippet: str) -> None:
    exec(snippet)


def safe(value: str) -> int:
    return int(value)
