"""Demo definition script: depends on `settings`."""


def _init(get_module, module, settings):
    def greet(name: str) -> str:
        return f"{settings['greeting']}, {name}{settings['punctuation']}"

    return greet


define("greeter", ["settings"], _init)  # noqa: F821
