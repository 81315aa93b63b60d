"""Generate a backend schema declaration from the field configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional
from xml.sax.saxutils import quoteattr

from searchbridge.fields.config import FieldRegistry
from searchbridge.host import ObjectStore
from searchbridge.models import FieldConfig, FieldType

# Host storage type (lower-cased) -> backend field type
STORAGE_TYPES: Dict[str, FieldType] = {
    "boolean": FieldType.STRING,
    "stringfield": FieldType.STRING,
    "string": FieldType.STRING,
    "enum": FieldType.STRING,
    "multienum": FieldType.STRING,
    "date": FieldType.DATE,
    "time": FieldType.DATE,
    "datetime": FieldType.DATE,
    "ss_datetime": FieldType.DATE,
    "decimal": FieldType.FLOAT,
    "float": FieldType.FLOAT,
    "double": FieldType.LONG,
    "int": FieldType.LONG,
    "integer": FieldType.LONG,
    "year": FieldType.LONG,
    "percentage": FieldType.LONG,
    "money": FieldType.CURRENCY,
    "currency": FieldType.CURRENCY,
    "text": FieldType.TEXT_EN_SPLITTING,
    "varchar": FieldType.TEXT_EN_SPLITTING,
    "htmltext": FieldType.TEXT_EN_SPLITTING,
    "htmlvarchar": FieldType.TEXT_EN_SPLITTING,
}
FALLBACK_TYPE = FieldType.TEXT_WS

# Solr field type classes used when rendering schema.xml
_TYPE_CLASSES = {
    FieldType.STRING: ('solr.StrField', ''),
    FieldType.LONG: ('solr.TrieLongField', ''),
    FieldType.FLOAT: ('solr.TrieFloatField', ''),
    FieldType.DATE: ('solr.TrieDateField', ''),
    FieldType.CURRENCY: ('solr.CurrencyField', ' currencyConfig="currency.xml"'),
    FieldType.URL: ('solr.StrField', ''),
    FieldType.TEXT: ('solr.TextField', ''),
    FieldType.TEXT_WS: ('solr.TextField', ''),
    FieldType.TEXT_EN_SPLITTING: ('solr.TextField', ''),
}
_ANALYZERS = {
    FieldType.TEXT: ["solr.StandardTokenizerFactory", "solr.LowerCaseFilterFactory"],
    FieldType.TEXT_WS: ["solr.WhitespaceTokenizerFactory"],
    FieldType.TEXT_EN_SPLITTING: [
        "solr.WhitespaceTokenizerFactory",
        "solr.WordDelimiterFilterFactory",
        "solr.LowerCaseFilterFactory",
        "solr.PorterStemFilterFactory",
    ],
}


@dataclass(slots=True)
class SchemaField:
    name: str
    type: FieldType
    stored: bool = False
    indexed: bool = True
    multiple: bool = False

    def to_dict(self) -> dict:
        return {
            "Name": self.name,
            "Type": self.type.value,
            "Stored": self.stored,
            "Indexed": self.indexed,
            "Multiple": self.multiple,
        }


SYNTHETIC_FIELDS = (
    SchemaField("body", FieldType.TEXT_EN_SPLITTING, stored=True, indexed=True),
    SchemaField("LastEdited", FieldType.DATE, stored=True, indexed=True),
    SchemaField("Link", FieldType.URL, stored=True, indexed=False),
)


def _bool(value: bool) -> str:
    return "true" if value else "false"


@dataclass(slots=True)
class SchemaDeclaration:
    fields: List[SchemaField] = field(default_factory=list)
    unique_key: str = "id"

    def get(self, name: str) -> Optional[SchemaField]:
        return next((item for item in self.fields if item.name == name), None)

    def to_dict(self) -> dict:
        return {
            "uniqueKey": self.unique_key,
            "fields": [item.to_dict() for item in self.fields],
        }

    def to_xml(self, name: str = "searchbridge") -> str:
        lines = ['<?xml version="1.0" encoding="UTF-8" ?>', f"<schema name={quoteattr(name)} version=\"1.5\">"]
        lines.append("  <types>")
        used_types = {item.type for item in self.fields} | {FieldType.STRING}
        for field_type in sorted(used_types, key=lambda t: t.value):
            cls, extra = _TYPE_CLASSES.get(field_type, _TYPE_CLASSES[FieldType.TEXT_WS])
            analyzers = _ANALYZERS.get(field_type)
            if not analyzers:
                lines.append(f'    <fieldType name="{field_type.value}" class="{cls}"{extra}/>')
                continue
            lines.append(f'    <fieldType name="{field_type.value}" class="{cls}">')
            lines.append("      <analyzer>")
            tokenizer, *filters = analyzers
            lines.append(f'        <tokenizer class="{tokenizer}"/>')
            lines.extend(f'        <filter class="{item}"/>' for item in filters)
            lines.append("      </analyzer>")
            lines.append("    </fieldType>")
        lines.append("  </types>")
        lines.append("  <fields>")
        lines.append(
            f'    <field name="{self.unique_key}" type="string" indexed="true" stored="true" required="true"/>'
        )
        for item in self.fields:
            lines.append(
                f"    <field name={quoteattr(item.name)} type=\"{item.type.value}\""
                f" indexed=\"{_bool(item.indexed)}\" stored=\"{_bool(item.stored)}\""
                f" multiValued=\"{_bool(item.multiple)}\"/>"
            )
        lines.append("  </fields>")
        lines.append(f"  <uniqueKey>{self.unique_key}</uniqueKey>")
        lines.append("</schema>")
        return "\n".join(lines) + "\n"


class SchemaGenerator:
    """Aggregates field configuration across classes into one declaration."""

    def __init__(self, fields: FieldRegistry, store: Optional[ObjectStore] = None) -> None:
        self.fields = fields
        self.store = store

    def generate(self, class_names: Optional[Iterable[str]] = None) -> SchemaDeclaration:
        entries: Dict[str, SchemaField] = {}
        for class_name in class_names if class_names is not None else self.fields.class_names():
            for field_name in self.fields.fields_for(class_name):
                config = self.fields.config_for(class_name, field_name)
                if config.target in entries:
                    continue
                entries[config.target] = self.field_for(class_name, config)

        for synthetic in SYNTHETIC_FIELDS:
            entries.pop(synthetic.name, None)
            entries[synthetic.name] = replace(synthetic)
        return SchemaDeclaration(fields=list(entries.values()))

    def field_for(self, class_name: str, config: FieldConfig) -> SchemaField:
        field_type = config.type or self.infer_type(class_name, config.source)
        stored = bool(config.stored) if config.stored is not None else False
        indexed = bool(config.indexed) if config.indexed is not None else True
        if config.target == "ObjectID":
            stored = indexed = True
        if config.target == "ClassName":
            stored = indexed = True
            field_type = FieldType.STRING
        return SchemaField(
            name=config.target,
            type=field_type,
            stored=stored,
            indexed=indexed,
            multiple=bool(config.multiple),
        )

    def infer_type(self, class_name: str, source: str) -> FieldType:
        storage_type = None
        if self.store is not None and "." not in source:
            storage_type = self.store.field_type(class_name, source)
        if not storage_type:
            return FALLBACK_TYPE
        return STORAGE_TYPES.get(storage_type.lower(), FALLBACK_TYPE)
