"""HTML page template for assembled compiler output.

The template carries two markers inside a module script element. Each
marker occurs exactly once; render_page() relies on that.
"""

from __future__ import annotations

SCRIPT_MARKER = "/*JS_GOES_HERE*/"
INIT_MARKER = "/*INIT_GOES_HERE*/"

INDEX_HTML = """
<!doctype html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, user-scalable=no, initial-scale=1.0, maximum-scale=1.0, minimum-scale=1.0">
    <meta http-equiv="X-UA-Compatible" content="ie=edge">
    <title>Document</title>
</head>
<body>
    <script type="module">
    /*JS_GOES_HERE*/
    /*INIT_GOES_HERE*/
    </script>
</body>
</html>
"""


def _split_template(template: str) -> tuple[str, str, str]:
    """Split a template around its script and init markers.

    Args:
        template: HTML text holding SCRIPT_MARKER followed by INIT_MARKER.

    Returns:
        The text before the script marker, between the markers, and after
        the init marker.

    Raises:
        ValueError: If either marker is missing, repeated, or out of order.
    """
    for marker in (SCRIPT_MARKER, INIT_MARKER):
        count = template.count(marker)
        if count != 1:
            msg = f"template must contain {marker} exactly once, found {count}"
            raise ValueError(msg)

    head, rest = template.split(SCRIPT_MARKER)
    if INIT_MARKER not in rest:
        msg = f"{INIT_MARKER} must follow {SCRIPT_MARKER}"
        raise ValueError(msg)
    middle, tail = rest.split(INIT_MARKER)
    return head, middle, tail


_HEAD, _MIDDLE, _TAIL = _split_template(INDEX_HTML)


def render_page(script: str, init: str) -> str:
    """Substitute the script and init expression into the page template.

    Plain textual substitution with no escaping. The script is never
    scanned for markers, so marker text inside it is left alone.

    Args:
        script: JavaScript glue module text.
        init: Initialization expression invoking the entry point.

    Returns:
        Complete HTML document.
    """
    return f"{_HEAD}{script}{_MIDDLE}{init}{_TAIL}"
