"""
Kolonnen Dashboard — crew daily-performance reporting core

Analytics backend for aggregating crew daily reports (Tagesmeldungen)
into period KPIs, and for importing bills of quantities (LV) from
CSV/Excel uploads.

To feed records from a database:
    Load rows from the daily-report table as dicts and pass them to
    kpis.aggregate_period or dashboard.get_period_overview; rows are
    converted with DailyRecord.from_mapping. Nothing here writes back.

To connect to a front end:
    Call dashboard.get_period_overview(records, preset) to get a plain
    dict for KPI cards, and loaders.parse_file + validate_and_transform
    for the LV upload dialog.

To accept new LV header spellings:
    Add the normalised spelling to config.HEADER_ALIASES.
"""
