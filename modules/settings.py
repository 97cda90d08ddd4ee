"""Demo definition script: shared settings, no requirements."""


def _init(get_module, module):
    return {"greeting": "hello", "punctuation": "!"}


define("settings", [], _init)  # noqa: F821
