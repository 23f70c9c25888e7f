from porter.manifest.generator import generate_manifest
from porter.manifest.loader import load_manifest, parse_manifest, save_manifest, serialize_manifest
from porter.manifest.types import MANIFEST_FILENAME, Manifest, ValidationResult
from porter.manifest.validator import validate_manifest

__all__ = [
    "MANIFEST_FILENAME",
    "Manifest",
    "ValidationResult",
    "generate_manifest",
    "load_manifest",
    "parse_manifest",
    "save_manifest",
    "serialize_manifest",
    "validate_manifest",
]
