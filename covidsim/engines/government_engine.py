from ..models import GOVERNMENT_MEASURES

MODES = ('virus', 'government')

# (cases per 100k threshold, alert level), checked highest first
ALERT_THRESHOLDS = ((1000, 4), (500, 3), (100, 2), (10, 1))

# Fixed measure bundle adopted on escalation to each level
MEASURE_BUNDLES = {
    1: ('mask_mandate',),
    2: ('mask_mandate', 'event_ban'),
    3: ('lockdown_partial', 'border_closure', 'mask_mandate'),
    4: ('lockdown_full', 'border_closure', 'mask_mandate', 'event_ban', 'curfew'),
}

MAX_TOTAL_EFFECTIVENESS = 0.95


def combined_reduction(active_measures, catalog=GOVERNMENT_MEASURES):
    """Product of (1 - effectiveness) over active measures."""
    factor = 1.0
    for measure in active_measures:
        entry = catalog.get(measure)
        if entry:
            factor *= (1 - entry['effectiveness'])
    return factor


def alert_level_for(cases_per_capita):
    for threshold, level in ALERT_THRESHOLDS:
        if cases_per_capita > threshold:
            return level
    return 0


class GovernmentResponseEngine:
    def __init__(self, rng, mode='virus', measures=GOVERNMENT_MEASURES):
        self.rng = rng
        self.mode = mode if mode in MODES else 'virus'
        self.measures = measures

    def set_mode(self, mode):
        if mode not in MODES:
            return False
        self.mode = mode
        return True

    def update_responses(self, world, current_date):
        """
        Automatic escalation. A no-op in 'government' mode, where measures
        only change through explicit toggles.
        Returns codes of countries whose alert level rose.
        """
        if self.mode == 'government':
            return []

        escalated = []
        for country in world.countries.values():
            if not country.infected:
                continue

            response = country.government_response
            new_alert_level = alert_level_for(country.cases_per_capita)
            if new_alert_level > response.alert_level:
                response.alert_level = new_alert_level
                self.implement_measures(country, new_alert_level, current_date)
                escalated.append(country.code)
        return escalated

    def implement_measures(self, country, alert_level, current_date):
        bundle = MEASURE_BUNDLES.get(alert_level, ())
        # Adoption speed depends on political stability
        if self.rng.random() < country.government_response.political_stability:
            country.active_measures |= set(bundle)
            country.last_measure_date = current_date
            return True
        return False

    def apply_measure(self, country, measure, base_infectivity):
        """
        Toggle ``measure`` for ``country`` and refresh its effective infectivity.
        Unknown countries or measures are ignored.
        """
        if country is None or measure not in self.measures:
            return False

        if measure in country.active_measures:
            country.active_measures.discard(measure)
        else:
            country.active_measures.add(measure)

        total = sum(self.measures[m]['effectiveness'] for m in country.active_measures if m in self.measures)
        total = min(total, MAX_TOTAL_EFFECTIVENESS)
        country.effective_infectivity = base_infectivity * (1 - total)
        return True
