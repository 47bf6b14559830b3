import asyncio
import math

import numpy as np

MIN_SPEED = 0.1
MAX_SPEED = 5.0
BASE_TICK_SECONDS = 1.0


class SimulationClock:
    """
    Fires ``on_tick`` every ``1s / speed`` while running and not paused.
    ``on_tick`` returns None once the simulation has passed its end date,
    which stops the loop.

    Without a running asyncio loop (scripts, tests) start() only sets the
    flags and ticks are driven through fire().
    """

    def __init__(self, on_tick, speed=1.0):
        self.on_tick = on_tick
        self.speed = 1.0
        self.is_running = False
        self.is_paused = False
        self._task = None
        self.set_speed(speed)

    @property
    def tick_period(self):
        """Seconds between ticks."""
        return BASE_TICK_SECONDS / self.speed

    @property
    def tick_period_ms(self):
        return self.tick_period * 1000

    def set_speed(self, speed):
        try:
            speed = float(speed)
        except (TypeError, ValueError):
            return self.speed
        if math.isnan(speed):
            return self.speed
        self.speed = float(np.clip(speed, MIN_SPEED, MAX_SPEED))
        return self.speed

    def start(self):
        if self.is_running:
            return False
        self.is_running = True
        self.is_paused = False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return True
        self._task = loop.create_task(self.run())
        return True

    def pause(self):
        """Toggle the paused flag. The timer keeps firing."""
        self.is_paused = not self.is_paused
        return self.is_paused

    def stop(self):
        self.is_running = False
        self.is_paused = False
        task, self._task = self._task, None
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()

    def fire(self):
        """One scheduler tick: advances a day unless paused."""
        if self.is_paused:
            return None
        return self.on_tick()

    async def run(self):
        try:
            while self.is_running:
                if not self.is_paused and self.on_tick() is None:
                    print("Simulation finished: end date reached.")
                    break
                await asyncio.sleep(self.tick_period)
        except Exception as e:
            print(f"Simulation Error: {e}")
        finally:
            # stop() may already have handed the clock to a newer task
            if self._task is asyncio.current_task():
                self.is_running = False
                self._task = None
