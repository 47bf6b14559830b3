import math

RECOVERY_LAG_DAYS = 7
RECOVERY_SHARE = 0.95


class OutcomeEngine:
    def update_outcomes(self, world, virus_params):
        """
        Resolve active cases into recoveries and deaths (procedural days only).
        Returns (total_recoveries, total_deaths) for the day.
        """
        duration = virus_params.infectious_days + RECOVERY_LAG_DAYS
        if duration <= 0:
            return 0, 0
        recovery_rate = 1 / duration
        mortality_rate = max(0.0, virus_params.mortality_pct / 100)

        day_recoveries = 0
        day_deaths = 0
        for country in world.countries.values():
            if country.active <= 0:
                continue

            new_recoveries = math.floor(country.active * recovery_rate * RECOVERY_SHARE)
            new_deaths = math.floor(country.active * recovery_rate * mortality_rate)
            new_recoveries = min(new_recoveries, country.active)
            new_deaths = min(new_deaths, country.active - new_recoveries)

            country.recovered += new_recoveries
            country.deaths += new_deaths
            country.active -= (new_recoveries + new_deaths)
            country.daily_deaths = new_deaths

            world.accumulate(new_recoveries=new_recoveries, new_deaths=new_deaths)
            day_recoveries += new_recoveries
            day_deaths += new_deaths

        return day_recoveries, day_deaths
