"""
Archive Tree — date-based archive navigation for async SQLAlchemy models.

Counts rows per year and per month of a date column, and builds a nested
``{year: {month: <Select>}}`` tree whose leaves stay unexecuted.
"""

from archive_tree.archive import ArchiveConfig, DateArchive, MonthNames

__all__ = ["ArchiveConfig", "DateArchive", "MonthNames", "__version__"]
__version__ = "0.1.0"
