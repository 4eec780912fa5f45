from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class KeyValuePair:
    """A labelled field read from the invoice."""

    key: str
    value: str
    confidence: float | None = None


@dataclass(frozen=True)
class TableData:
    """Line-item table with one header row."""

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractedData:
    """Structured result of extracting one invoice image."""

    key_value_pairs: list[KeyValuePair] = field(default_factory=list)
    table: TableData | None = None
    summary: list[KeyValuePair] = field(default_factory=list)
    confidence: float | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
