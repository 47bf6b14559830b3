from datetime import date

from ..etl.data_loader import DataLoadError

DEFAULT_VARIANT_SCHEDULE = (
    ("2020-01-01", "original"),
    ("2020-12-20", "alpha"),
    ("2021-04-15", "delta"),
    ("2021-11-24", "omicron"),
)


class VariantScheduler:
    def __init__(self, variants, schedule=None):
        """
        variants: catalog id -> Variant
        schedule: ordered (date, variant_id) pairs; the first entry is active at start
        """
        self.variants = variants
        self.schedule = []
        for entry_date, variant_id in (DEFAULT_VARIANT_SCHEDULE if schedule is None else schedule):
            if isinstance(entry_date, str):
                entry_date = date.fromisoformat(entry_date)
            if variant_id not in variants:
                raise DataLoadError("variant schedule", f"unknown variant '{variant_id}'")
            self.schedule.append((entry_date, variant_id))
        if not self.schedule:
            raise DataLoadError("variant schedule", "schedule is empty")

        self.current_variant = self.schedule[0][1]

    @property
    def initial_variant(self):
        return self.schedule[0][1]

    def reset(self):
        self.current_variant = self.initial_variant

    def active(self):
        return self.variants[self.current_variant]

    def check_variant_change(self, current_date, virus_params):
        """
        Switch variant when the simulated day equals a schedule date whose variant
        differs from the active one. Multipliers compound on the live parameters.
        Returns the new Variant, or None.
        """
        for entry_date, variant_id in self.schedule:
            if entry_date == current_date and variant_id != self.current_variant:
                self.current_variant = variant_id
                variant = self.variants[variant_id]
                virus_params.infectivity *= variant.transmissibility_multiplier
                virus_params.severity_pct *= variant.severity_multiplier
                return variant
        return None
