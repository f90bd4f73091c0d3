"""
Trace Logger Utility for H2J

Records the decisions the engines take while mapping a message (runtime data
type resolution, repetitions discarded by singular slots, unresolved dynamic
keys, array expansion) and writes them out as a Markdown document.

A trace logger belongs to a single transform call; the engines never keep one
between calls.
"""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class VerbosityLevel(Enum):
    """Verbosity levels for trace logging."""
    MINIMAL = 1
    NORMAL = 2
    DETAILED = 3
    DEBUG = 4

    @classmethod
    def from_string(cls, level: str) -> 'VerbosityLevel':
        """Convert string to VerbosityLevel enum.

        Args:
            level: String representation of verbosity level

        Returns:
            VerbosityLevel enum value

        Raises:
            ValueError: If level string is not recognized
        """
        try:
            return cls[level.strip().upper()]
        except KeyError:
            valid = [member.name.lower() for member in cls]
            raise ValueError(f"Unknown verbosity level: {level}. Must be one of: {valid}")


class TraceLogger:
    """
    Trace logger for documenting conversion decisions in Markdown format.

    Entries are buffered in memory and written by ``write_log`` once the
    transform is over.
    """

    SECTIONS = (
        ('decision', 'Decisions'),
        ('source_data', 'Source Data'),
        ('reasoning', 'Reasoning'),
    )

    def __init__(
        self,
        enabled: bool = True,
        verbosity: VerbosityLevel = VerbosityLevel.NORMAL,
        output_directory: Path = Path("trace_logs"),
        log_file_name: Optional[str] = None
    ):
        self.enabled = enabled
        self.verbosity = verbosity
        self.output_directory = Path(output_directory)
        self.log_file_name = log_file_name
        self.entries: List[Dict[str, Any]] = []
        self.start_time = datetime.now()

    @classmethod
    def from_config(cls, trace_log_config) -> Optional['TraceLogger']:
        """Build a trace logger from a TraceLogConfig, or None when disabled."""
        if trace_log_config is None or not trace_log_config.enabled:
            return None
        return cls(
            enabled=True,
            verbosity=VerbosityLevel.from_string(trace_log_config.verbosity),
            output_directory=Path(trace_log_config.output_directory)
        )

    def _accepts(self, verbosity_required: VerbosityLevel) -> bool:
        return self.enabled and verbosity_required.value <= self.verbosity.value

    def _append(self, entry_type: str, title: str, verbosity_required: VerbosityLevel, **payload) -> None:
        self.entries.append({
            'type': entry_type,
            'title': title,
            'timestamp': datetime.now().isoformat(),
            'verbosity': verbosity_required.name,
            **payload
        })

    def log_decision(
        self,
        decision: str,
        context: Dict[str, Any] = None,
        verbosity_required: VerbosityLevel = VerbosityLevel.NORMAL
    ) -> None:
        """Log a mapping decision.

        Args:
            decision: Description of the decision made
            context: Additional context data
            verbosity_required: Minimum verbosity level required to log this entry
        """
        if self._accepts(verbosity_required):
            self._append('decision', decision, verbosity_required, context=context or {})

    def log_source_data(
        self,
        source_type: str,
        source_data: Any,
        verbosity_required: VerbosityLevel = VerbosityLevel.DETAILED
    ) -> None:
        """Log message data a decision was based on."""
        if self._accepts(verbosity_required):
            self._append('source_data', source_type, verbosity_required, data=source_data)

    def log_reasoning(
        self,
        reasoning: str,
        context: Dict[str, Any] = None,
        verbosity_required: VerbosityLevel = VerbosityLevel.DETAILED
    ) -> None:
        """Log why an unusual outcome was produced."""
        if self._accepts(verbosity_required):
            self._append('reasoning', reasoning, verbosity_required, context=context or {})

    def entries_of(self, entry_type: str) -> List[Dict[str, Any]]:
        return [entry for entry in self.entries if entry['type'] == entry_type]

    def write_log(self, message_file: str, output_file: str) -> Optional[Path]:
        """Write the buffered entries to a Markdown file.

        Args:
            message_file: Path to the source HL7 message
            output_file: Path to the output JSON file

        Returns:
            Path to the written log file, or None if logging is disabled
        """
        if not self.enabled:
            return None

        self.output_directory.mkdir(parents=True, exist_ok=True)

        if self.log_file_name:
            filename = self.log_file_name
        else:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f"{Path(message_file).stem}_{timestamp}.md"

        log_path = self.output_directory / filename
        log_path.write_text(self.to_markdown(message_file, output_file), encoding='utf-8')
        return log_path

    def to_markdown(self, message_file: str, output_file: str) -> str:
        """Render the buffered entries as Markdown."""
        lines = [
            f"# Trace Log: {Path(message_file).name} → {Path(output_file).name}",
            "",
            f"**Generated**: {datetime.now().isoformat()}",
            f"**Start Time**: {self.start_time.isoformat()}",
            f"**Verbosity Level**: {self.verbosity.name}",
            f"**Total Entries**: {len(self.entries)}",
            "",
            "---",
            "",
        ]

        for entry_type, heading in self.SECTIONS:
            entries = self.entries_of(entry_type)
            if not entries:
                continue
            lines.append(f"## {heading}")
            lines.append("")
            for i, entry in enumerate(entries, 1):
                lines.extend(self._render_entry(i, entry))

        lines.extend(["---", "", "## Summary", ""])
        for entry_type, heading in self.SECTIONS:
            lines.append(f"- **{heading}**: {len(self.entries_of(entry_type))}")

        return "\n".join(lines)

    @staticmethod
    def _render_entry(number: int, entry: Dict[str, Any]) -> List[str]:
        lines = [
            f"### {number}. {entry['title']}",
            f"- **Time**: {entry['timestamp']}",
            f"- **Level**: {entry['verbosity']}",
        ]
        if entry.get('context'):
            lines.append("- **Context**:")
            for key, value in entry['context'].items():
                lines.append(f"  - {key}: `{value}`")
        if 'data' in entry:
            lines.append("- **Data**:")
            lines.append("```json")
            lines.append(json.dumps(entry['data'], indent=2, default=str))
            lines.append("```")
        lines.append("")
        return lines
