import math
from datetime import date

from .government_engine import combined_reduction

# Fixed end of the historical horizon used by the long-run blend
HISTORICAL_HORIZON_END = date(2022, 12, 31)
WORLD_POPULATION = 7.8e9

EARLY_GROWTH_RATE = 1.15   # first month after the first case
SLOW_GROWTH_RATE = 1.08    # days 30-89
EARLY_PHASE_DAYS = 30
BLEND_PHASE_DAYS = 90

# Historical first confirmed case per country
FIRST_CASE_DATES = {
    'CHN': '2019-12-31', 'THA': '2020-01-13', 'JPN': '2020-01-16', 'KOR': '2020-01-20',
    'USA': '2020-01-21', 'VNM': '2020-01-23', 'SGP': '2020-01-23', 'FRA': '2020-01-24',
    'AUS': '2020-01-25', 'CAN': '2020-01-25', 'DEU': '2020-01-27', 'FIN': '2020-01-29',
    'ITA': '2020-01-31', 'GBR': '2020-01-31', 'RUS': '2020-01-31', 'ESP': '2020-01-31',
    'IND': '2020-01-30', 'PHL': '2020-01-30', 'SWE': '2020-01-31', 'BEL': '2020-02-04',
    'MYS': '2020-01-25', 'NPL': '2020-01-24', 'LKA': '2020-01-27', 'KHM': '2020-01-27',
    'ARE': '2020-01-29', 'EGY': '2020-02-14', 'IRN': '2020-02-19', 'ISR': '2020-02-21',
    'LBN': '2020-02-21', 'AFG': '2020-02-24', 'BHR': '2020-02-24', 'IRQ': '2020-02-24',
    'KWT': '2020-02-24', 'OMN': '2020-02-24', 'PAK': '2020-02-26', 'GEO': '2020-02-26',
    'BRA': '2020-02-26', 'CHE': '2020-02-25', 'AUT': '2020-02-25', 'HRV': '2020-02-25',
    'NOR': '2020-02-26', 'ROU': '2020-02-26', 'DNK': '2020-02-27', 'EST': '2020-02-27',
    'NLD': '2020-02-27', 'SMR': '2020-02-27', 'NGA': '2020-02-27', 'LTU': '2020-02-28',
    'BLR': '2020-02-28', 'AZE': '2020-02-28', 'ISL': '2020-02-28', 'MCO': '2020-02-29',
    'QAT': '2020-02-29', 'ECU': '2020-02-29', 'LUX': '2020-02-29', 'ARM': '2020-03-01',
    'CZE': '2020-03-01', 'DOM': '2020-03-01', 'IDN': '2020-03-02', 'AND': '2020-03-02',
    'JOR': '2020-03-02', 'LVA': '2020-03-02', 'MAR': '2020-03-02', 'SAU': '2020-03-02',
    'TUN': '2020-03-02', 'ARG': '2020-03-03', 'CHL': '2020-03-03', 'UKR': '2020-03-03',
    'FRO': '2020-03-03', 'GIB': '2020-03-03', 'LIE': '2020-03-03', 'POL': '2020-03-04',
    'SVN': '2020-03-04', 'HUN': '2020-03-04', 'BIH': '2020-03-05', 'ZAF': '2020-03-05',
    'BTN': '2020-03-06', 'CMR': '2020-03-06', 'COL': '2020-03-06', 'CRI': '2020-03-06',
    'PER': '2020-03-06', 'SRB': '2020-03-06', 'SVK': '2020-03-06', 'TGO': '2020-03-06',
    'VAT': '2020-03-06', 'BGR': '2020-03-08', 'MDV': '2020-03-08', 'PRY': '2020-03-08',
    'ALB': '2020-03-09', 'CYP': '2020-03-09', 'TUR': '2020-03-11', 'CUB': '2020-03-11',
    'HND': '2020-03-11', 'IRL': '2020-03-12', 'PAN': '2020-03-09', 'BOL': '2020-03-10',
    'JAM': '2020-03-10', 'BRN': '2020-03-09', 'MNG': '2020-03-10', 'MLT': '2020-03-07',
    'MDA': '2020-03-07', 'PRT': '2020-03-02',
}


def historical_counts(days_since_first_case, first_case_date, totals):
    """
    Cumulative (cases, deaths, recovered) for a country ``days_since_first_case``
    days after its first case.

    d = 0       -> one case
    d < 30      -> 15% daily growth from one case
    d < 90      -> 8% daily growth from the day-30 baseline
    otherwise   -> linear share of the end-of-horizon historical totals
    """
    d = days_since_first_case
    if d == 0:
        return 1, 0, 0
    if d < EARLY_PHASE_DAYS:
        cases = math.floor(EARLY_GROWTH_RATE ** d)
        return cases, math.floor(cases * 0.02), math.floor(cases * 0.10)
    if d < BLEND_PHASE_DAYS:
        base = math.floor(EARLY_GROWTH_RATE ** EARLY_PHASE_DAYS)
        cases = math.floor(base * SLOW_GROWTH_RATE ** (d - EARLY_PHASE_DAYS))
        return cases, math.floor(cases * 0.03), math.floor(cases * 0.30)

    max_days = (HISTORICAL_HORIZON_END - first_case_date).days
    progression = min(d / max_days, 1) if max_days > 0 else 1
    return (
        math.floor(totals['total_cases'] * progression),
        math.floor(totals['total_deaths'] * progression),
        math.floor(totals['total_recovered'] * progression),
    )


class SpreadEngine:
    def __init__(self, dataset, rng, start_date, first_case_dates=None):
        self.dataset = dataset
        self.rng = rng
        self.start_date = start_date
        dates = FIRST_CASE_DATES if first_case_dates is None else first_case_dates
        self.first_case_dates = {
            code: date.fromisoformat(d) if isinstance(d, str) else d
            for code, d in dates.items()
        }

    def uses_historical(self, current_date):
        return self.dataset.has_month(current_date.strftime('%Y-%m'))

    def update_virus_spread(self, world, current_date, virus_params):
        """
        Advance every country by one day. The model is chosen globally:
        historical-blended when the month has a historical record, procedural otherwise.
        Returns 'historical' or 'procedural'.
        """
        if self.uses_historical(current_date):
            self.update_from_historical(world, current_date)
            world.aggregate_from_countries()
            return 'historical'

        self.simulate_virus_spread(world, current_date, virus_params)
        return 'procedural'

    # --- Historical-blended model ---

    def update_from_historical(self, world, current_date):
        for code in self.dataset.historical.index:
            country = world.get(code)
            first_case_date = self.first_case_dates.get(code)
            if country is None or first_case_date is None:
                continue

            if current_date < first_case_date:
                # Not arrived yet
                country.clear()
                continue

            d = (current_date - first_case_date).days
            totals = self.dataset.historical_totals(code)
            cases, deaths, recovered = historical_counts(d, first_case_date, totals)

            country.cases = cases
            country.deaths = deaths
            country.recovered = recovered
            country.sync_active()
            country.update_per_capita()

            if country.cases > 0 and not country.infected:
                country.infected = True
                country.first_case_date = first_case_date

            # Daily figures are a share of today's cumulative values
            if d < EARLY_PHASE_DAYS:
                country.daily_cases = max(1, math.floor(cases * 0.15))
                country.daily_deaths = math.floor(deaths * 0.1)
            else:
                country.daily_cases = math.floor(cases * 0.02)
                country.daily_deaths = math.floor(deaths * 0.01)

    # --- Procedural model ---

    def simulate_virus_spread(self, world, current_date, virus_params):
        new_infections = {}
        for code, country in world.countries.items():
            if country.active > 0 or self.should_spread_to_country(country, world, virus_params):
                new_cases = self.calculate_new_cases(country, world, current_date, virus_params)
                new_infections[code] = new_cases

                if new_cases > 0 and not country.infected:
                    country.infected = True
                    country.first_case_date = current_date

        for code, new_cases in new_infections.items():
            country = world.countries[code]
            country.cases += new_cases
            country.active += new_cases
            country.daily_cases = new_cases
            country.update_per_capita()
            world.accumulate(new_cases=new_cases)

        return new_infections

    def should_spread_to_country(self, country, world, virus_params):
        if country.infected:
            return True
        global_infection_rate = world.global_stats.active_cases / WORLD_POPULATION
        spread_probability = global_infection_rate * virus_params.infectivity * 0.001
        return self.rng.random() < spread_probability

    def calculate_new_cases(self, country, world, current_date, virus_params):
        max_possible = max(0, (country.population or 0) - country.cases)

        if country.active <= 0:
            # Seeding from the global pool
            global_spread_factor = world.global_stats.total_cases / 1000000
            if self.rng.random() < 0.001 * global_spread_factor:
                return min(int(self.rng.integers(1, 11)), max_possible)
            return 0

        if virus_params.infectious_days <= 0:
            return 0

        effective_r0 = virus_params.infectivity * combined_reduction(country.active_measures)
        effective_r0 *= country.government_response.compliance
        base_new_cases = country.active * (effective_r0 / virus_params.infectious_days)

        population_density_factor = min((country.population or 0) / 1000000, 2)
        random_factor = 0.8 + self.rng.random() * 0.4
        days_since_start = (current_date - self.start_date).days
        growth_factor = min(1 + days_since_start / 365, 3)

        new_cases = math.floor(base_new_cases * population_density_factor * random_factor * growth_factor)
        return max(0, min(new_cases, max_possible))
