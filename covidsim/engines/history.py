import pandas as pd

HISTORY_COLUMNS = [
    'date', 'total_cases', 'active_cases', 'total_deaths',
    'total_recovered', 'daily_cases', 'daily_deaths', 'variant',
]


class StatsHistory:
    """Per-day global statistics, exported as a DataFrame for charts and CSV."""

    def __init__(self):
        self.records = []

    def clear(self):
        self.records = []

    def record(self, current_date, global_stats, variant_id):
        row = global_stats.to_dict()
        row['date'] = current_date
        row['variant'] = variant_id
        self.records.append(row)

    def __len__(self):
        return len(self.records)

    def to_frame(self, tail=None):
        records = self.records[-tail:] if tail else self.records
        df = pd.DataFrame(records, columns=HISTORY_COLUMNS)
        df['date'] = pd.to_datetime(df['date'])
        return df.set_index('date')
