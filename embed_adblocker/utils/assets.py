import json
from functools import lru_cache
from importlib import resources


@lru_cache(maxsize=None)
def load_asset(name: str) -> str:
    """Read a text file shipped in the package's ``static`` directory."""
    return resources.files("embed_adblocker").joinpath("static", name).read_text(encoding="utf-8")


def js_literal(value) -> str:
    """Serialize ``value`` as a JavaScript literal that is safe inside a ``<script>`` element."""
    return json.dumps(value).replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def render_asset(name: str, **values: str) -> str:
    """Load an asset and substitute its ``__NAME__`` placeholders."""
    text = load_asset(name)
    for key, value in values.items():
        text = text.replace(f"__{key.upper()}__", value)
    return text
