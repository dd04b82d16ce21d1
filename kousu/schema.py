"""
Versioned JSON format for work-log documents.

This module is the single source of truth for the on-disk format: the known
schema generations, the upgrade chain from legacy generations to the current
one, structural validation, and the diff-friendly serializer.

Three generations exist:

    0.1.0  numbers stored as strings, "jissekis"/"jisseki" keys,
           fumei "" for days of the adjacent month
    0.3.0  numbers stored as numbers, fumei null for those days
    3.0.0  current: "works"/"hours" keys, fumei always a number

Legacy generations are upgraded in memory and never written back.
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import ValidationError
from .logging_utils import get_logger, log_warning
from .models import Document, WorkDay


class DocumentSchema:
    """
    Defines the work-log document format.

    Field order here is also the key order used when writing documents.
    """

    VERSION_010 = '0.1.0'
    VERSION_030 = '0.3.0'
    VERSION_CURRENT = '3.0.0'

    KNOWN_VERSIONS: List[str] = [VERSION_010, VERSION_030, VERSION_CURRENT]

    # Legacy key -> current key
    LEGACY_KEYS: Dict[str, str] = {
        'jissekis': 'works',
        'jisseki': 'hours',
    }

    WORK_FIELDS: List[str] = [
        'date',
        'begin',
        'end',
        'yokujitsu',
        'kyukei',
        'yasumi',
        'sagyou',
        'fumei',
        'hours',
    ]

    STRING_FIELDS = ('date', 'begin', 'end')
    NUMBER_FIELDS = ('kyukei', 'sagyou', 'fumei')

    # Fields that legacy generations may hold as numeric strings
    NUMERIC_STRING_FIELDS = ('kyukei', 'sagyou', 'fumei')

    YASUMI_VALUES = ('', '全休', '午前', '午後')

    ENCODING = 'utf-8'
    SNIPPET_LENGTH = 40


@dataclass(frozen=True)
class DocumentV010:
    """Raw document of generation 0.1.0."""
    data: dict


@dataclass(frozen=True)
class DocumentV030:
    """Raw document of generation 0.3.0."""
    data: dict


@dataclass(frozen=True)
class DocumentV300:
    """Raw document of the current generation, not yet validated."""
    data: dict


VersionedDocument = Union[DocumentV010, DocumentV030, DocumentV300]


def _snippet(value: Any) -> str:
    """Render a value for an error message, truncated for readability."""
    try:
        text = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        text = repr(value)
    limit = DocumentSchema.SNIPPET_LENGTH
    if len(text) > limit:
        text = text[:limit] + '...'
    return text


def _fail(path: str, message: str, value: Any = None, show_value: bool = True):
    if show_value:
        raise ValidationError(f"invalid JSON: {path}: {message} (got: {_snippet(value)})")
    raise ValidationError(f"invalid JSON: {path}: {message}")


def _is_number(value: Any) -> bool:
    # bool is a subclass of int but never a valid hour count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def detect_generation(value: Any) -> VersionedDocument:
    """
    Tag a parsed JSON value with its schema generation.

    Args:
        value: Parsed JSON value

    Returns:
        DocumentV010, DocumentV030 or DocumentV300 wrapping the value

    Raises:
        ValidationError: If the value is not an object or the version is unknown
    """
    known = ', '.join(f'"{v}"' for v in DocumentSchema.KNOWN_VERSIONS)

    if not isinstance(value, dict):
        _fail('(root)', 'must be an object', value)

    if 'version' not in value:
        _fail('version', f'not defined, must be one of {known}', show_value=False)

    version = value['version']
    if version == DocumentSchema.VERSION_010:
        return DocumentV010(value)
    if version == DocumentSchema.VERSION_030:
        return DocumentV030(value)
    if version == DocumentSchema.VERSION_CURRENT:
        return DocumentV300(value)

    _fail('version', f'must be one of {known}', version)


def _parse_numeric_string(value: Any, path: str) -> Any:
    if not isinstance(value, str):
        return value
    try:
        number = float(value.strip())
    except ValueError:
        _fail(path, 'must be a numeric string', value)
    if not math.isfinite(number):
        _fail(path, 'must be a finite number', value)
    return number


def _coerce_numeric_strings(record: dict, base: str) -> dict:
    """Replace numeric strings in the number fields and the hours of a legacy record."""
    record = dict(record)
    for name in DocumentSchema.NUMERIC_STRING_FIELDS:
        if name in record:
            record[name] = _parse_numeric_string(record[name], f'{base}.{name}')
    hours = record.get('jisseki')
    if isinstance(hours, dict):
        record['jisseki'] = {
            project_id: _parse_numeric_string(value, f'{base}.jisseki.{project_id}')
            for project_id, value in hours.items()
        }
    return record


def upgrade_v010(document: DocumentV010) -> DocumentV030:
    """
    Convert a 0.1.0 document to the 0.3.0 shape.

    Numeric strings become numbers and an empty ``fumei`` becomes null.
    Parts that do not have the expected shape are carried over unchanged so
    that validation reports them.

    Raises:
        ValidationError: If a numeric string cannot be parsed
    """
    data = dict(document.data)
    data['version'] = DocumentSchema.VERSION_030

    records = data.get('jissekis')
    if isinstance(records, list):
        upgraded = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                upgraded.append(record)
                continue
            record = dict(record)
            if record.get('fumei') == '':
                record['fumei'] = None
            record = _coerce_numeric_strings(record, f'jissekis[{i}]')
            upgraded.append(record)
        data['jissekis'] = upgraded

    return DocumentV030(data)


def upgrade_v030(document: DocumentV030) -> DocumentV300:
    """
    Convert a 0.3.0 document to the current shape.

    Renames ``jissekis``/``jisseki`` to ``works``/``hours`` and maps a null
    ``fumei`` to 0.0. The null-to-zero step is lossy: the current generation
    does not distinguish "not tracked" from zero for adjacent-month days.
    Numeric strings left in a 0.3.0 file are converted as for 0.1.0.

    Raises:
        ValidationError: If a numeric string cannot be parsed
    """
    data = {}
    for key, value in document.data.items():
        data[DocumentSchema.LEGACY_KEYS.get(key, key)] = value
    data['version'] = DocumentSchema.VERSION_CURRENT

    records = data.get('works')
    if isinstance(records, list):
        upgraded = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                upgraded.append(record)
                continue
            record = _coerce_numeric_strings(record, f'works[{i}]')
            record = {
                DocumentSchema.LEGACY_KEYS.get(key, key): value
                for key, value in record.items()
            }
            if 'fumei' in record and record['fumei'] is None:
                record['fumei'] = 0.0
            upgraded.append(record)
        data['works'] = upgraded

    return DocumentV300(data)


def upgrade(document: VersionedDocument) -> DocumentV300:
    """
    Upgrade a document of any known generation to the current one.

    Each step is fully materialized before the next one runs.
    """
    if isinstance(document, DocumentV010):
        document = upgrade_v010(document)
    if isinstance(document, DocumentV030):
        document = upgrade_v030(document)
    return document


def _validate_work(record: Any, base: str) -> WorkDay:
    if not isinstance(record, dict):
        _fail(base, 'must be an object', record)

    # Mistyped fields are reported before missing ones
    for name in DocumentSchema.WORK_FIELDS:
        if name not in record:
            continue
        value = record[name]
        path = f'{base}.{name}'
        if name in DocumentSchema.STRING_FIELDS:
            if not isinstance(value, str):
                _fail(path, 'must be a string', value)
        elif name in DocumentSchema.NUMBER_FIELDS:
            if not _is_number(value):
                _fail(path, 'must be a number', value)
        elif name == 'yokujitsu':
            if not isinstance(value, bool):
                _fail(path, 'must be a boolean', value)
        elif name == 'yasumi':
            if value not in DocumentSchema.YASUMI_VALUES:
                allowed = ', '.join(json.dumps(v, ensure_ascii=False) for v in DocumentSchema.YASUMI_VALUES)
                _fail(path, f'must be one of {allowed}', value)
        elif name == 'hours':
            if not isinstance(value, dict):
                _fail(path, 'must be an object ({"project": hours})', value)
            for project_id, hours in value.items():
                if not _is_number(hours):
                    _fail(f'{path}.{project_id}', 'must be a number', hours)

    missing = [name for name in DocumentSchema.WORK_FIELDS if name not in record]
    if missing:
        _fail(base, f'missing field(s): {", ".join(missing)}', show_value=False)

    return WorkDay(
        date=record['date'],
        begin=record['begin'],
        end=record['end'],
        yokujitsu=record['yokujitsu'],
        kyukei=float(record['kyukei']),
        yasumi=record['yasumi'],
        sagyou=float(record['sagyou']),
        fumei=float(record['fumei']),
        hours={project_id: float(hours) for project_id, hours in record['hours'].items()},
    )


def validate_current(document: DocumentV300) -> Document:
    """
    Validate a current-generation document and build the typed model.

    Raises:
        ValidationError: On the first structural violation
    """
    data = document.data

    if 'projects' not in data:
        _fail('projects', 'not defined, must be an object ({"project": "projectName"})', show_value=False)
    projects = data['projects']
    if not isinstance(projects, dict):
        _fail('projects', 'must be an object ({"project": "projectName"})', projects)
    for project_id, name in projects.items():
        if not isinstance(name, str):
            _fail(f'projects.{project_id}', 'must be a string', name)

    if 'works' not in data:
        _fail('works', 'not defined, must be an array', show_value=False)
    works = data['works']
    if not isinstance(works, list):
        _fail('works', 'must be an array', works)

    result = Document(
        version=DocumentSchema.VERSION_CURRENT,
        projects=dict(projects),
        works=[_validate_work(record, f'works[{i}]') for i, record in enumerate(works)],
    )

    unknown = sorted({
        project_id
        for work in result.works
        for project_id in work.hours
        if project_id not in result.projects
    })
    if unknown:
        log_warning(f"Project(s) used in works but not listed in projects: {', '.join(unknown)}")

    return result


def validate_document(value: Any) -> Document:
    """
    Validate a parsed JSON value of any known generation.

    Args:
        value: Parsed JSON value

    Returns:
        Current-generation Document

    Raises:
        ValidationError: If the value is not a valid document
    """
    versioned = detect_generation(value)
    if not isinstance(versioned, DocumentV300):
        get_logger().debug(f"Upgrading document from version {versioned.data['version']}")
    return validate_current(upgrade(versioned))


def parse_document(text: str) -> Document:
    """
    Parse and validate a JSON document from text.

    Raises:
        ValidationError: If the text is not valid JSON or not a valid document
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"invalid JSON: {e}")
    return validate_document(value)


class DocumentLoader:
    """
    Loads work-log documents from disk.
    """

    def __init__(self, file_path: str):
        """
        Initialize the loader.

        Args:
            file_path: Path to the JSON file

        Raises:
            ValidationError: If the file doesn't exist
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise ValidationError(f"JSON file not found: {file_path}")

    def load(self) -> Document:
        """
        Load, upgrade and validate the document.

        Returns:
            Current-generation Document

        Raises:
            ValidationError: If the file cannot be read or is invalid
        """
        try:
            text = self.file_path.read_text(encoding=DocumentSchema.ENCODING)
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Failed to read {self.file_path}: {e}")
        return parse_document(text)


def load_document(file_path: str) -> Document:
    """
    Convenience function to load a document file.

    Raises:
        ValidationError: If loading fails
    """
    return DocumentLoader(file_path).load()


def dump_document(document: Document) -> str:
    """
    Serialize a document in the current generation.

    The layout is fixed for readable diffs: two-space indentation, one
    project per line and one work day per line.

    Returns:
        JSON text ending with a newline
    """
    data = document.to_dict()

    projects = json.dumps(data['projects'], indent=2, ensure_ascii=False)
    projects = projects.replace('\n', '\n  ')

    if data['works']:
        rows = [
            '    ' + json.dumps(work, ensure_ascii=False, separators=(',', ':'))
            for work in data['works']
        ]
        works = '[\n' + ',\n'.join(rows) + '\n  ]'
    else:
        works = '[]'

    return (
        '{\n'
        f'  "version": {json.dumps(DocumentSchema.VERSION_CURRENT)},\n'
        f'  "projects": {projects},\n'
        f'  "works": {works}\n'
        '}\n'
    )


def write_document(document: Document, file_path: str):
    """Write a document to disk in the current generation."""
    Path(file_path).write_text(dump_document(document), encoding=DocumentSchema.ENCODING)
