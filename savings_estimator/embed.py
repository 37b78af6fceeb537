"""Height notifications for pages that embed the estimator in an iframe."""

from __future__ import annotations

import json

import streamlit.components.v1 as components


RESIZE_MESSAGE_TYPE = "calc-resize"

_RESIZE_LISTENER_TEMPLATE = """
<script>
(function() {
  // Runs inside the component iframe; the app document is our parent and the
  // embedding page (if any) is the parent's parent.
  const app = window.parent;
  const host = app && app.parent && app.parent !== app ? app.parent : null;
  if (!host || !app.ResizeObserver) {
    return;
  }
  const body = app.document.body;
  const post = () => {
    host.postMessage({type: __TYPE__, height: Math.ceil(body.scrollHeight)}, "*");
  };
  const observer = new app.ResizeObserver(post);
  observer.observe(body);
  post();
})();
</script>
"""


def resize_message(height: float) -> dict:
    return {"type": RESIZE_MESSAGE_TYPE, "height": max(0, int(round(height)))}


def resize_listener_html() -> str:
    return _RESIZE_LISTENER_TEMPLATE.replace("__TYPE__", json.dumps(RESIZE_MESSAGE_TYPE))


def mount_resize_listener() -> None:
    """Mount the listener; without a hosting frame the script does nothing."""
    components.html(resize_listener_html(), height=0, width=0)
