from pathlib import Path

from tsp_race.island import IslandConfig, IslandModel


def main():
    data_path = Path("data/capitals.tsp")
    if not data_path.exists():
        raise FileNotFoundError("Run from the repository root (data/capitals.tsp not found)")

    cfg = IslandConfig(
        data_path=str(data_path),
        population_size=50,
        offspring=10,
        workers=2,
        run_duration=3.0,
        random_seed=123,
    )
    model = IslandModel(cfg, on_improvement=lambda imp, tour: print(
        f"{imp.elapsed:6.2f}s worker {imp.worker_id}: score={imp.score:.2f}"
    ))
    result = model.run()
    print(f"best score={result.score:.2f} after {result.received} reports")
    print(result.best)


if __name__ == "__main__":
    main()
