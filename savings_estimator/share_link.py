"""Shareable portfolio state carried in the page URL query string."""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping
from typing import Any, Protocol

import streamlit.components.v1 as components


SHARE_PARAM = "s"

_URL_SYNC_TEMPLATE = """
<script>
(function() {
  // Runs inside the component iframe; the app document is our parent.
  const app = window.parent;
  if (!app || !app.history || !app.history.replaceState) {
    return;
  }
  const url = new URL(app.location.href);
  if (url.searchParams.get(__PARAM__) === __VALUE__) {
    return;
  }
  url.searchParams.set(__PARAM__, __VALUE__);
  app.history.replaceState(app.history.state, "", url.toString());
})();
</script>
"""


class ShareableLocationStore(Protocol):
    def load(self) -> Any: ...

    def save(self, state: dict) -> None: ...


def encode_state(state: dict) -> str:
    return json.dumps(state, separators=(",", ":"))


def decode_state(raw: str) -> Any:
    return json.loads(raw)


def _js_string(value: str) -> str:
    return json.dumps(value).replace("</", "<\\/")


class QueryParamLocationStore:
    """Reads the encoded state from one query parameter; queues writes in ``outbox``.

    ``params`` is Streamlit's ``st.query_params`` in the app and is only read:
    assigning to it makes the frontend push a browser history entry. Saved
    state is queued in ``outbox`` and written by ``mount_share_url_sync``,
    which rewrites the address with ``history.replaceState``.
    """

    def __init__(
        self,
        params: Mapping[str, Any],
        outbox: MutableMapping[str, str] | None = None,
        param: str = SHARE_PARAM,
    ):
        self._params = params
        self._param = param
        self.outbox = outbox if outbox is not None else {}

    def load(self) -> Any:
        raw = self._params.get(self._param)
        if isinstance(raw, list):
            raw = raw[-1] if raw else None
        if raw is None or raw == "":
            return None
        return decode_state(str(raw))

    def save(self, state: dict) -> None:
        self.outbox[self._param] = encode_state(state)


def share_url_sync_html(encoded: str, param: str = SHARE_PARAM) -> str:
    return _URL_SYNC_TEMPLATE.replace("__PARAM__", _js_string(param)).replace("__VALUE__", _js_string(encoded))


def mount_share_url_sync(outbox: Mapping[str, str], param: str = SHARE_PARAM) -> None:
    """Write the queued state into the address bar without adding history entries."""
    encoded = outbox.get(param)
    if not encoded:
        return
    components.html(share_url_sync_html(encoded, param), height=0, width=0)
