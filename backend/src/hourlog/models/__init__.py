from .tracking import (  # noqa: F401
    DailyRecord,
    DayRecord,
    EntryKind,
    RecordRead,
    Statistics,
    StatsRange,
    TimeEntry,
    TimeEntryRead,
)
