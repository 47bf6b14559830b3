from ..models import Country, GlobalStats, GovernmentResponse

COUNTRY_NAMES = {
    'USA': 'United States', 'CHN': 'China', 'IND': 'India', 'BRA': 'Brazil',
    'RUS': 'Russia', 'FRA': 'France', 'GBR': 'United Kingdom', 'TUR': 'Turkey',
    'IRN': 'Iran', 'DEU': 'Germany', 'VNM': 'Vietnam', 'ITA': 'Italy',
    'IDN': 'Indonesia', 'POL': 'Poland', 'UKR': 'Ukraine', 'ZAF': 'South Africa',
    'NLD': 'Netherlands', 'IRQ': 'Iraq', 'PHL': 'Philippines', 'MYS': 'Malaysia',
    'PER': 'Peru', 'CZE': 'Czech Republic', 'JPN': 'Japan', 'CAN': 'Canada',
    'CHL': 'Chile', 'BGD': 'Bangladesh', 'BEL': 'Belgium', 'THA': 'Thailand',
    'ISR': 'Israel', 'PAK': 'Pakistan', 'ROU': 'Romania', 'ESP': 'Spain',
    'ARG': 'Argentina', 'AUS': 'Australia', 'KOR': 'South Korea', 'MEX': 'Mexico',
    'COL': 'Colombia', 'SWE': 'Sweden', 'PRT': 'Portugal', 'CHE': 'Switzerland',
    'AUT': 'Austria', 'SGP': 'Singapore', 'EGY': 'Egypt', 'NGA': 'Nigeria',
    'SAU': 'Saudi Arabia', 'GRC': 'Greece', 'NOR': 'Norway', 'DNK': 'Denmark',
    'FIN': 'Finland', 'IRL': 'Ireland', 'NZL': 'New Zealand', 'VAT': 'Vatican City',
}


class WorldState:
    def __init__(self, population, rng, index_case=None, base_infectivity=None):
        """
        population: Series/dict code -> population
        rng: numpy Generator used for the fixed per-country response traits
        index_case: optional (code, first_case_date) seeded with one active case
        """
        self.population = population
        self.countries = {}
        self.global_stats = GlobalStats()
        self.setup_countries(rng, index_case, base_infectivity)

    def setup_countries(self, rng, index_case=None, base_infectivity=None):
        self.countries = {}
        for code, population in self.population.items():
            self.countries[code] = Country(
                code=code,
                name=COUNTRY_NAMES.get(code, code),
                population=int(population or 0),
                effective_infectivity=base_infectivity,
                government_response=GovernmentResponse(
                    alert_level=0,
                    compliance=0.6 + rng.random() * 0.4,
                    medical_capacity=0.5 + rng.random() * 0.5,
                    political_stability=0.7 + rng.random() * 0.3,
                ),
            )
        self.global_stats = GlobalStats()

        if index_case:
            code, first_case_date = index_case
            country = self.countries.get(code)
            if country:
                country.cases = 1
                country.active = 1
                country.infected = True
                country.first_case_date = first_case_date
                country.update_per_capita()
                self.global_stats.total_cases = 1
                self.global_stats.active_cases = 1

    def get(self, code):
        return self.countries.get(code)

    # --- Aggregation strategies ---
    # The historical path overwrites totals by summation; the procedural
    # path accumulates deltas. Both are kept as-is.

    def aggregate_from_countries(self):
        stats = GlobalStats()
        for country in self.countries.values():
            stats.total_cases += country.cases or 0
            stats.total_deaths += country.deaths or 0
            stats.total_recovered += country.recovered or 0
            stats.active_cases += country.active or 0
            stats.daily_cases += country.daily_cases or 0
            stats.daily_deaths += country.daily_deaths or 0
        self.global_stats = stats
        return stats

    def accumulate(self, new_cases=0, new_recoveries=0, new_deaths=0):
        stats = self.global_stats
        stats.total_cases += new_cases
        stats.active_cases += new_cases - new_recoveries - new_deaths
        stats.total_recovered += new_recoveries
        stats.total_deaths += new_deaths
        return stats

    def sum_daily_stats(self):
        self.global_stats.daily_cases = sum(c.daily_cases for c in self.countries.values())
        self.global_stats.daily_deaths = sum(c.daily_deaths for c in self.countries.values())

    def top_countries(self, limit=10):
        ranked = sorted(
            (c for c in self.countries.values() if c.cases > 0),
            key=lambda c: c.cases,
            reverse=True,
        )
        return ranked[:max(0, int(limit))]
