"""LocalDataBagStore — data bags read from a directory tree.

Layout on disk (the layout used by local-mode configuration runs):

    <root>/
      whitelist/
        my_whitelist.json
        other_whitelist.yaml

Each item is parsed with yaml.safe_load — JSON documents are valid YAML, so
both formats share one parser. Extensions are tried in
DATA_BAG_ITEM_EXTENSIONS order; the first existing file wins.

Error mapping:
  - root, bag directory, or item file missing → DataBagItemNotFound
  - unreadable file, bad encoding, or YAML/JSON parse error
                                              → DataBagStoreUnavailable
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Optional

import yaml

from hostwhitelist.constants import DATA_BAG_ITEM_EXTENSIONS, DEFAULT_DATA_BAG_PATH
from hostwhitelist.store.protocol import (
    DataBagItemNotFound,
    DataBagStoreUnavailable,
    validate_names,
)
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)


class LocalDataBagStore:
    """DataBagStore reading items from ``<root>/<bag>/<item>.(json|yaml|yml)``."""

    def __init__(self, root: str = DEFAULT_DATA_BAG_PATH) -> None:
        self._root = os.path.expanduser(root)

    @property
    def root(self) -> str:
        return self._root

    def fetch_item(self, data_bag: str, item_id: str) -> Mapping[str, Any]:
        validate_names(data_bag, item_id)

        bag_dir = os.path.join(self._root, data_bag)
        if not os.path.isdir(bag_dir):
            raise DataBagItemNotFound(
                data_bag, item_id, f"data bag directory not found: {bag_dir}"
            )

        path = self._find_item_file(bag_dir, item_id)
        if path is None:
            raise DataBagItemNotFound(data_bag, item_id, f"no item file in {bag_dir}")

        # Opened as bytes so PyYAML does the decoding and reports bad
        # encodings as ReaderError instead of UnicodeDecodeError.
        try:
            with open(path, "rb") as fh:
                raw = yaml.safe_load(fh)
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise DataBagStoreUnavailable(
                data_bag, item_id, f"parse error in {path}: {exc}"
            ) from exc
        except OSError as exc:
            raise DataBagStoreUnavailable(
                data_bag, item_id, f"could not read {path}: {exc}"
            ) from exc

        logger.debug("Data bag item read", data_bag=data_bag, item_id=item_id, path=path)
        return raw

    def _find_item_file(self, bag_dir: str, item_id: str) -> Optional[str]:
        for ext in DATA_BAG_ITEM_EXTENSIONS:
            candidate = os.path.join(bag_dir, item_id + ext)
            if os.path.isfile(candidate):
                return candidate
        return None
