from gmailreader.application.ports.message_source import ListPage, MessageSource
from gmailreader.application.ports.record_sink import RecordSink
from gmailreader.application.ports.scheduler import Scheduler

__all__ = ["ListPage", "MessageSource", "RecordSink", "Scheduler"]
