from gmailreader.application.use_cases.fetch_records import RecordFetcher
from gmailreader.application.use_cases.poll_window import DriverStatus, RetryPolicy, WindowPollDriver
from gmailreader.application.use_cases.precision_filter import filter_records

__all__ = [
    "RecordFetcher",
    "filter_records",
    "WindowPollDriver",
    "DriverStatus",
    "RetryPolicy",
]
