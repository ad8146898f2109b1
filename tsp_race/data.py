from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
import tsplib95


TSPLIB_KEYWORDS = ("NAME", "TYPE", "COMMENT", "DIMENSION", "EDGE_WEIGHT_TYPE")
FORMATS = ("auto", "plain", "tsplib")


class LoadError(Exception):
    """Raised when a city source cannot be read or contains a malformed record."""


@dataclass(frozen=True)
class City:
    name: str
    lat: float = field(compare=False)
    lon: float = field(compare=False)


def _where(path: Optional[Path], lineno: Optional[int]) -> str:
    if path is None and lineno is None:
        return ""
    if lineno is None:
        return f"{path}: "
    return f"{path or '<input>'}:{lineno}: "


def parse_city(
    fields: Sequence[str], lineno: Optional[int] = None, path: Optional[Path] = None
) -> City:
    if len(fields) != 3:
        raise LoadError(f"{_where(path, lineno)}expected 3 fields, got {len(fields)}")
    name = fields[0].strip()
    try:
        lat = float(fields[1])
        lon = float(fields[2])
    except ValueError as exc:
        raise LoadError(f"{_where(path, lineno)}invalid coordinate ({exc})") from exc
    if not np.isfinite([lat, lon]).all():
        raise LoadError(f"{_where(path, lineno)}coordinates must be finite")
    return City(name=name, lat=lat, lon=lon)


def _check_cities(cities: List[City], path: Path) -> List[City]:
    if not cities:
        raise LoadError(f"{path}: no cities found")
    seen = set()
    for city in cities:
        if city.name in seen:
            raise LoadError(f"{path}: duplicate city {city.name!r}")
        seen.add(city.name)
    return cities


def _read_lines(path: Path) -> List[str]:
    try:
        return path.read_text().splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"cannot read {path}: {exc}") from exc


def parse_cities(lines: Iterable[str], path: Optional[Path] = None) -> List[City]:
    cities: List[City] = []
    for lineno, line in enumerate(lines, start=1):
        fields = line.split()
        if not fields:
            continue
        cities.append(parse_city(fields, lineno=lineno, path=path))
    return cities


def read_cities(path: Union[str, Path]) -> List[City]:
    path = Path(path)
    return _check_cities(parse_cities(_read_lines(path), path=path), path)


def _geo_degrees(coord: float) -> float:
    # TSPLIB GEO coordinates are DDD.MM (degrees, minutes).
    degrees = int(coord)
    minutes = coord - degrees
    return degrees + 5.0 * minutes / 3.0


def read_tsplib(path: Union[str, Path]) -> List[City]:
    path = Path(path)
    try:
        problem = tsplib95.load(str(path))
    except Exception as exc:
        raise LoadError(f"cannot parse TSPLIB file {path}: {exc}") from exc
    if problem.edge_weight_type != "GEO":
        raise LoadError(
            f"{path}: unsupported EDGE_WEIGHT_TYPE {problem.edge_weight_type!r} (only GEO)"
        )
    cities = []
    for node, coord in problem.node_coords.items():
        if len(coord) != 2:
            raise LoadError(f"{path}: node {node} has {len(coord)} coordinates")
        lat, lon = (_geo_degrees(float(c)) for c in coord)
        cities.append(City(name=str(node), lat=lat, lon=lon))
    return _check_cities(cities, path)


def detect_format(path: Union[str, Path]) -> str:
    path = Path(path)
    for line in _read_lines(path):
        token = line.strip().split(":", 1)[0].strip().upper()
        if not token:
            continue
        return "tsplib" if token in TSPLIB_KEYWORDS else "plain"
    return "plain"


def load_cities(path: Union[str, Path], fmt: str = "auto") -> List[City]:
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format {fmt!r}; expected one of {', '.join(FORMATS)}.")
    if fmt == "auto":
        fmt = detect_format(path)
    if fmt == "tsplib":
        return read_tsplib(path)
    return read_cities(path)
