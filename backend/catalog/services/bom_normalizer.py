"""
BOM Normalizer

Turns a parsed BOM document into a flat, ordered list of ExtractedComponent
records. Two document shapes are supported:

- CycloneDX (component tree): ``metadata.component`` first, then
  ``components`` with nested ``components`` flattened depth-first, pre-order.
- SPDX (package list): ``packages``; purl, CPE and group are recovered from
  ``externalRefs``.

Extraction is lenient. Missing or ill-typed optional fields become None or an
empty list; only a document that is not a mapping (or of no known format,
when detection is requested) is rejected.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from catalog.core.constants import SPDX_NO_ASSERTION_VALUES
from catalog.core.exceptions import InvalidBOMError
from catalog.models.component import (
    ComponentHash,
    ComponentLicense,
    ExternalReference,
    ExtractedComponent,
)
from catalog.models.types import BOMFormat
from catalog.services.purl_utils import get_purl_namespace, get_purl_type

logger = logging.getLogger(__name__)

# SPDX primaryPackagePurpose -> component type
SPDX_PURPOSE_TO_TYPE = {
    "APPLICATION": "application",
    "FRAMEWORK": "framework",
    "LIBRARY": "library",
    "CONTAINER": "container",
    "OPERATING-SYSTEM": "operating-system",
    "DEVICE": "device",
    "FIRMWARE": "firmware",
    "SOURCE": "source",
    "ARCHIVE": "archive",
    "FILE": "file",
    "INSTALL": "install",
    "OTHER": "other",
}

SPDX_CPE_REFERENCE_TYPES = ("cpe23Type", "cpe22Type")

_ENTITY_RE = re.compile(r"^(?:Person|Organization):\s*(.+)$")


def _str(value: Any) -> Optional[str]:
    """The value when it is a non-empty string, else None."""
    if isinstance(value, str) and value:
        return value
    return None


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def extract_entity_name(entity: Any) -> Optional[str]:
    """Strip the SPDX ``Person:`` / ``Organization:`` prefix from a name."""
    entity = _str(entity)
    if entity is None:
        return None
    match = _ENTITY_RE.match(entity)
    return match.group(1).strip() if match else entity


def map_spdx_purpose(purpose: Any) -> Optional[str]:
    purpose = _str(purpose)
    if purpose is None:
        return None
    return SPDX_PURPOSE_TO_TYPE.get(purpose, purpose.lower())


def detect_bom_format(document: Any) -> BOMFormat:
    """
    Detect the format of a parsed BOM document.

    Raises:
        InvalidBOMError: if the document is not a mapping or matches no
            supported format
    """
    if not isinstance(document, dict):
        raise InvalidBOMError(f"BOM must be a JSON object, got {type(document).__name__}")

    if document.get("bomFormat") == "CycloneDX":
        return BOMFormat.CYCLONEDX

    schema = _str(document.get("$schema")) or ""
    if "cyclonedx" in schema.lower():
        return BOMFormat.CYCLONEDX

    spdx_version = _str(document.get("spdxVersion")) or ""
    if spdx_version.startswith("SPDX-") or "SPDXID" in document:
        return BOMFormat.SPDX

    raise InvalidBOMError("Unrecognized BOM format: expected a CycloneDX or SPDX document")


class BOMNormalizer:
    """
    Stateless normalizer; one instance can serve any number of callers.
    """

    def __init__(self):
        self.format_handlers: Dict[BOMFormat, Callable[[Dict[str, Any]], List[ExtractedComponent]]] = {
            BOMFormat.CYCLONEDX: self._extract_cyclonedx,
            BOMFormat.SPDX: self._extract_spdx,
        }

    def normalize(
        self,
        document: Any,
        fmt: Union[BOMFormat, str, None] = None,
    ) -> List[ExtractedComponent]:
        """
        Normalize ``document`` to ExtractedComponent records.

        Args:
            document: Parsed BOM (JSON object)
            fmt: BOMFormat or its value; detected from the document when None

        Raises:
            InvalidBOMError: document is not a mapping, or fmt is unknown
        """
        if not isinstance(document, dict):
            raise InvalidBOMError(f"BOM must be a JSON object, got {type(document).__name__}")

        if fmt is None:
            bom_format = detect_bom_format(document)
        else:
            try:
                bom_format = BOMFormat(fmt.lower() if isinstance(fmt, str) else fmt)
            except ValueError:
                raise InvalidBOMError(f"Unsupported BOM format: {fmt}") from None

        components = self.format_handlers[bom_format](document)
        logger.debug(f"Normalized {len(components)} components from {bom_format.value} BOM")
        return components

    # CycloneDX

    def _extract_cyclonedx(self, bom: Dict[str, Any]) -> List[ExtractedComponent]:
        raw: List[Dict[str, Any]] = []

        main_component = _dict(_dict(bom.get("metadata")).get("component"))
        if main_component:
            raw.append(main_component)
        raw.extend(self._walk_cyclonedx(_list(bom.get("components"))))

        return self._map_all(raw, self._map_cyclonedx_component, "CycloneDX")

    def _walk_cyclonedx(self, components: List[Any]) -> Iterator[Dict[str, Any]]:
        """Depth-first, pre-order walk over a component list and its nested lists."""
        for comp in components:
            if not isinstance(comp, dict):
                continue
            yield comp
            yield from self._walk_cyclonedx(_list(comp.get("components")))

    def _map_cyclonedx_component(self, comp: Dict[str, Any]) -> Optional[ExtractedComponent]:
        name = _str(comp.get("name"))
        if name is None:
            return None

        purl = _str(comp.get("purl"))
        author = _str(comp.get("author"))
        if author is None:
            # CycloneDX 1.6 moved authorship to an "authors" list
            authors = [a for a in _list(comp.get("authors")) if isinstance(a, dict)]
            author = _str(authors[0].get("name")) if authors else None

        return ExtractedComponent(
            name=name,
            version=_str(comp.get("version")),
            package_manager=get_purl_type(purl),
            purl=purl,
            cpe=_str(comp.get("cpe")),
            bom_ref=_str(comp.get("bom-ref")),
            type=_str(comp.get("type")),
            group=_str(comp.get("group")),
            scope=_str(comp.get("scope")),
            hashes=self._cyclonedx_hashes(_list(comp.get("hashes"))),
            licenses=self._cyclonedx_licenses(_list(comp.get("licenses"))),
            copyright=_str(comp.get("copyright")),
            supplier=_str(_dict(comp.get("supplier")).get("name")),
            author=author,
            publisher=_str(comp.get("publisher")),
            homepage=_str(comp.get("homepage")),
            description=_str(comp.get("description")),
            external_references=self._cyclonedx_references(_list(comp.get("externalReferences"))),
        )

    def _cyclonedx_hashes(self, hashes: List[Any]) -> List[ComponentHash]:
        result = []
        for h in hashes:
            h = _dict(h)
            algorithm, value = _str(h.get("alg")), _str(h.get("content"))
            if algorithm and value:
                result.append(ComponentHash(algorithm=algorithm, value=value))
        return result

    def _cyclonedx_licenses(self, licenses: List[Any]) -> List[ComponentLicense]:
        result = []
        for entry in licenses:
            entry = _dict(entry)
            expression = _str(entry.get("expression"))
            if expression:
                result.append(ComponentLicense(id=expression))
                continue

            lic = _dict(entry.get("license"))
            text = lic.get("text")
            if isinstance(text, dict):
                # Attachment form: {"contentType": ..., "content": ...}
                text = text.get("content")

            license_entry = ComponentLicense(
                id=_str(lic.get("id")),
                name=_str(lic.get("name")),
                url=_str(lic.get("url")),
                text=_str(text),
            )
            if license_entry.id or license_entry.name or license_entry.url or license_entry.text:
                result.append(license_entry)
        return result

    def _cyclonedx_references(self, refs: List[Any]) -> List[ExternalReference]:
        result = []
        for ref in refs:
            ref = _dict(ref)
            ref_type, url = _str(ref.get("type")), _str(ref.get("url"))
            if ref_type and url:
                result.append(ExternalReference(type=ref_type, url=url))
        return result

    # SPDX

    def _extract_spdx(self, bom: Dict[str, Any]) -> List[ExtractedComponent]:
        packages = [p for p in _list(bom.get("packages")) if isinstance(p, dict)]
        return self._map_all(packages, self._map_spdx_package, "SPDX")

    def _map_spdx_package(self, pkg: Dict[str, Any]) -> Optional[ExtractedComponent]:
        name = _str(pkg.get("name"))
        if name is None:
            return None

        refs = [_dict(r) for r in _list(pkg.get("externalRefs"))]
        purl = self._first_reference(refs, ("purl",))

        return ExtractedComponent(
            name=name,
            version=_str(pkg.get("versionInfo")),
            package_manager=get_purl_type(purl),
            purl=purl,
            cpe=self._first_reference(refs, SPDX_CPE_REFERENCE_TYPES),
            bom_ref=_str(pkg.get("SPDXID")),
            type=map_spdx_purpose(pkg.get("primaryPackagePurpose")),
            group=get_purl_namespace(purl),
            scope=None,
            hashes=self._spdx_checksums(_list(pkg.get("checksums"))),
            licenses=self._spdx_licenses(pkg),
            copyright=_str(pkg.get("copyrightText")),
            supplier=extract_entity_name(pkg.get("supplier")),
            author=extract_entity_name(pkg.get("originator")),
            publisher=None,
            homepage=_str(pkg.get("homepage")),
            description=_str(pkg.get("description")),
            external_references=self._spdx_references(refs),
        )

    @staticmethod
    def _first_reference(refs: List[Dict[str, Any]], reference_types: tuple) -> Optional[str]:
        for ref in refs:
            if ref.get("referenceType") in reference_types:
                locator = _str(ref.get("referenceLocator"))
                if locator:
                    return locator
        return None

    def _spdx_licenses(self, pkg: Dict[str, Any]) -> List[ComponentLicense]:
        result = []
        seen = set()
        for key in ("licenseConcluded", "licenseDeclared"):
            value = _str(pkg.get(key))
            if value is None or value in SPDX_NO_ASSERTION_VALUES or value in seen:
                continue
            seen.add(value)
            result.append(ComponentLicense(id=value))
        return result

    def _spdx_checksums(self, checksums: List[Any]) -> List[ComponentHash]:
        result = []
        for checksum in checksums:
            checksum = _dict(checksum)
            algorithm, value = _str(checksum.get("algorithm")), _str(checksum.get("checksumValue"))
            if algorithm and value:
                result.append(ComponentHash(algorithm=algorithm, value=value))
        return result

    def _spdx_references(self, refs: List[Dict[str, Any]]) -> List[ExternalReference]:
        excluded = ("purl",) + SPDX_CPE_REFERENCE_TYPES
        result = []
        for ref in refs:
            ref_type, url = _str(ref.get("referenceType")), _str(ref.get("referenceLocator"))
            if ref_type and url and ref_type not in excluded:
                result.append(ExternalReference(type=ref_type, url=url))
        return result

    # Shared

    def _map_all(
        self,
        raw: List[Dict[str, Any]],
        mapper: Callable[[Dict[str, Any]], Optional[ExtractedComponent]],
        label: str,
    ) -> List[ExtractedComponent]:
        components = []
        skipped = 0
        for entry in raw:
            component = mapper(entry)
            if component is None:
                skipped += 1
            else:
                components.append(component)

        if skipped:
            logger.debug(f"Skipped {skipped} {label} entries without a usable name")
        return components


# Singleton instance for easy import
bom_normalizer = BOMNormalizer()


def normalize_bom(document: Any, fmt: Union[BOMFormat, str, None] = None) -> List[ExtractedComponent]:
    """Convenience function to normalize a BOM."""
    return bom_normalizer.normalize(document, fmt)
