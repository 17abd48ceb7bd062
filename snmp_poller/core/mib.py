"""
MIB name index.

Loads MIB dictionaries produced by the libsmi `smidump` utility and maps
numeric OIDs to human-readable names. A dictionary is generated from an
ASN.1 MIB file with:

    smidump -k -f python RFC1213-MIB.txt > RFC1213-MIB.dic

The output is a Python literal (`MIB = {...}`), so it is read with
`ast.literal_eval` rather than executed.
"""

import ast
import logging
from pathlib import Path
from typing import Dict, List, Union

from .errors import MibLoadError


logger = logging.getLogger(__name__)

MIB_FILE_SUFFIX = ".dic"

# Sections of a smidump dictionary whose entries carry an "oid" key
NAMED_SECTIONS = ("nodes", "notifications")


def oid_to_tuple(oid_string: str) -> tuple:
    """Convert an OID string to a tuple of integers."""
    return tuple(int(x) for x in oid_string.strip(".").split(".") if x)


def read_mib_dictionary(path: Path) -> Dict[str, str]:
    """Read one smidump dictionary file and return its OID -> name entries."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise MibLoadError(f"cannot read MIB file {path}: {e}") from e

    marker = text.find("MIB = ")
    if marker < 0:
        raise MibLoadError(f"{path} is not a smidump python dictionary (no 'MIB =' assignment)")

    try:
        mib = ast.literal_eval(text[marker + len("MIB = "):].strip())
    except (ValueError, SyntaxError) as e:
        raise MibLoadError(f"cannot parse MIB file {path}: {e}") from e

    if not isinstance(mib, dict):
        raise MibLoadError(f"{path} does not define a MIB dictionary")

    names = {}
    for section in NAMED_SECTIONS:
        for name, node in (mib.get(section) or {}).items():
            if isinstance(node, dict) and node.get("oid"):
                names[str(node["oid"]).strip(".")] = name
    return names


class MibIndex:
    """
    OID to name dictionary shared by every SNMP client.

    Built once at startup from zero or more MIB paths, then sealed. After
    sealing it is read-only and safe to share between concurrent pollers.
    """

    def __init__(self):
        self._names: Dict[tuple, str] = {}
        self._sealed = False

    def __len__(self) -> int:
        return len(self._names)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self):
        self._sealed = True

    def add_mib_path(self, path: Union[str, Path]) -> int:
        """
        Load a MIB dictionary file, or every `.dic` file in a directory.

        Returns the number of names added. Raises MibLoadError for a missing
        path or a file that cannot be read; a failure in one file of a
        directory does not stop the other files from loading.
        """
        if self._sealed:
            raise RuntimeError("MIB index is sealed, no more MIB paths can be added")

        path = Path(path)
        if path.is_dir():
            added = 0
            for mib_file in sorted(path.glob(f"*{MIB_FILE_SUFFIX}")):
                try:
                    added += self._add_mib_file(mib_file)
                except MibLoadError as e:
                    logger.warning(f"Skipping MIB file: {e}")
            return added

        if not path.is_file():
            raise MibLoadError(f"MIB path {path} does not exist")

        return self._add_mib_file(path)

    def _add_mib_file(self, path: Path) -> int:
        added = 0
        for oid, name in read_mib_dictionary(path).items():
            try:
                key = oid_to_tuple(oid)
            except ValueError:
                logger.warning(f"Ignoring '{name}' with non-numeric OID {oid} in {path}")
                continue
            existing = self._names.get(key)
            if existing is None:
                self._names[key] = name
                added += 1
            elif existing != name:
                logger.warning(f"OID {oid} already named '{existing}', ignoring '{name}' from {path}")
        logger.debug(f"Loaded {added} MIB names from {path}")
        return added

    def map_oid(self, oid: str) -> List[str]:
        """
        Map an OID to its path of components.

        Each component is replaced by the name of the node ending at that
        position when the index knows it, e.g. with RFC1213-MIB loaded
        `1.3.6.1.2.1.1.1.0` maps to `1.3.6.1.2.mib-2.system.sysDescr.0`.
        """
        components = oid_to_tuple(oid)
        return [
            self._names.get(components[:i + 1], str(component))
            for i, component in enumerate(components)
        ]
