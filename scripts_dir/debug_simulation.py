import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from covidsim.etl.data_loader import load_dataset
from covidsim.engines.simulation_engine import SimulationEngine

def debug(days=400, seed=42, csv_path="timeseries.csv"):
    try:
        print("Loading Dataset...")
        dataset = load_dataset()

        print("Initializing Engine...")
        engine = SimulationEngine(dataset, seed=seed)
        engine.on_variant_changed(lambda evt: print(f"  -> variant {evt.variant_id} on {evt.date}"))

        print(f"Running {days} days...")
        advanced = engine.run_days(days)
        print(f"Advanced {advanced} days, now at {engine.current_date}")

        stats = engine.world.global_stats
        print(f"Global: cases={stats.total_cases:,} active={stats.active_cases:,} "
              f"deaths={stats.total_deaths:,} recovered={stats.total_recovered:,}")
        print(f"Virus params: {engine.virus_params.to_dict()}")

        print("Top countries:")
        for c in engine.get_top_countries(10):
            print(f"  {c['code']:<4} {c['cases']:>12,}  alert={c['government_response']['alert_level']} "
                  f"measures={c['active_measures']}")

        df = engine.get_timeseries()
        df.to_csv(csv_path)
        print(f"Time series ({df.shape[0]} rows) written to {csv_path}")

    except Exception as e:
        import traceback
        traceback.print_exc()

if __name__ == "__main__":
    debug()
