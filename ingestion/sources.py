# /ingestion/sources.py

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional
import csv
import os

from core.normalizer import normalize_name

class DataSource(ABC):
    """Abstract base class for a data source feeding the art graph."""
    name: str = "source"
    cypher: str = ""

    @abstractmethod
    def load_records(self) -> Iterator[Dict[str, str]]:
        """Yields raw records from the source."""
        pass

    @abstractmethod
    def to_params(self, record: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """Maps a record to the parameters of `cypher`, or None to skip it."""
        pass


def _value(record: Dict[str, str], key: str) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


class CsvSource(DataSource):
    """Reads rows from a CSV file with a header line."""
    def __init__(self, path: str):
        if not os.path.isfile(path):
            raise ValueError(f"The path {path} is not a valid file.")
        self.path = path

    def load_records(self) -> Iterator[Dict[str, str]]:
        with open(self.path, newline="", encoding="utf-8-sig") as f:
            yield from csv.DictReader(f)


class ArtistsCsvSource(CsvSource):
    """Artist biographies (columns: name, years, genre, nationality, bio, wikipedia, paintings)."""
    name = "artists"
    cypher = """
    MERGE (a:Artist {name: $name})
    SET a.bio = coalesce($bio, a.bio),
        a.years = coalesce($years, a.years),
        a.wikipedia = coalesce($wikipedia, a.wikipedia),
        a.nationality = coalesce(a.nationality, $nationality),
        a.paintings_count = coalesce(a.paintings_count, $paintings_count),
        a.source = coalesce(a.source, 'BestArtworks')
    REMOVE a.is_stub
    """

    def to_params(self, record):
        name = normalize_name(record.get("name"))
        if not name:
            return None
        paintings = _value(record, "paintings")
        return {
            "name": name,
            "bio": _value(record, "bio"),
            "years": _value(record, "years"),
            "wikipedia": _value(record, "wikipedia"),
            "nationality": _value(record, "nationality"),
            "paintings_count": int(paintings) if paintings and paintings.isdigit() else None,
        }


class ArtistInfoCsvSource(CsvSource):
    """Artist periods and schools (columns: artist, born-died, period, school, url, base, nationality)."""
    name = "artist_info"
    cypher = """
    MERGE (a:Artist {name: $name})
    SET a.born_died_str = coalesce(a.born_died_str, $born_died),
        a.school = coalesce(a.school, $school),
        a.wga_url = coalesce(a.wga_url, $url),
        a.nationality = coalesce(a.nationality, $nationality)
    REMOVE a.is_stub
    WITH a
    WHERE $period IS NOT NULL
    MERGE (m:Movement {name: $period})
    MERGE (a)-[:BELONGS_TO]->(m)
    """

    def to_params(self, record):
        name = normalize_name(record.get("artist"))
        if not name:
            return None
        return {
            "name": name,
            "born_died": _value(record, "born-died"),
            "school": _value(record, "school"),
            "url": _value(record, "url"),
            "nationality": _value(record, "nationality"),
            "period": _value(record, "period"),
        }


class ArtworkCsvSource(CsvSource):
    """Artworks (columns: ID, artist, title, picture data, file info, jpg url)."""
    name = "artworks"
    cypher = """
    MERGE (a:Artist {name: $artist_name})
    REMOVE a.is_stub
    MERGE (w:Artwork {id: $id})
    SET w.title = $title,
        w.meta_data = $meta_data,
        w.url = $url,
        w.file_info = $file_info
    MERGE (a)-[:CREATED]->(w)
    """

    def to_params(self, record):
        artist_name = normalize_name(record.get("artist"))
        artwork_id = _value(record, "ID")
        if not artist_name or not artwork_id:
            return None
        return {
            "artist_name": artist_name,
            "id": artwork_id,
            "title": _value(record, "title"),
            "meta_data": _value(record, "picture data"),
            "url": _value(record, "jpg url"),
            "file_info": _value(record, "file info"),
        }
