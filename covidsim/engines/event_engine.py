import math

LOCKDOWN_INFECTIVITY_FACTOR = 0.7
VACCINE_RECOVERY_SHARE = 0.10


class EventTrigger:
    def __init__(self, events):
        self.events = events
        self.processed_dates = set()

    def reset(self):
        self.processed_dates.clear()

    def check_events(self, current_date, world, virus_params):
        """
        Fire every loaded event dated today, at most once per date.
        Returns the fired events in load order.
        """
        fired = []
        for event in self.events:
            if event.date == current_date and event.date not in self.processed_dates:
                self.processed_dates.add(event.date)
                fired.append(event)
                self.apply_event_effects(event, world, virus_params)
        return fired

    def apply_event_effects(self, event, world, virus_params):
        if event.type == 'lockdown':
            # Permanent for the rest of the run
            virus_params.infectivity *= LOCKDOWN_INFECTIVITY_FACTOR
        elif event.type == 'vaccine':
            for country in world.countries.values():
                if country.active > 0:
                    vaccinated = math.floor(country.active * VACCINE_RECOVERY_SHARE)
                    country.recovered += vaccinated
                    country.active -= vaccinated
        # 'variant' events are informational; the variant scheduler owns transitions
