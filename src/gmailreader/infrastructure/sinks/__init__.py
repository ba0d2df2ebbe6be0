from gmailreader.infrastructure.sinks.collecting import CollectingSink
from gmailreader.infrastructure.sinks.json_lines import JsonLinesSink

__all__ = ["CollectingSink", "JsonLinesSink"]
