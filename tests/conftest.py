import os
import sys

import numpy as np
import pandas as pd
import pytest

# Add project root to path so the pipeline script can be imported
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

GOV = "Government regains territory"
NSA = "Non-state actor overtakes territory"

TOWNS = ["Kafr Nabl", "Saraqib", "Khan Shaykhun", "Tal Rifaat", "Manbij", "Al-Bab", "Jisr al-Shughur", "Qalaat Madiq"]
DISTRICTS = ["Idleb", "Ariha", "Jisr-Ash-Shugur", "Maarrat An Nu'man", "Afrin", "Al Bab", "Menbij"]

GOV_NOTES = [
    "Syrian government forces regains control of {town} village in {district} after clashes with opposition fighters.",
    "Regime forces regains control of {town} following a ground offensive supported by Russian airstrikes.",
]
GOV_OTHER = "Regime troops advanced towards {town} and secured the hills overlooking {district}."
NSA_NOTES = [
    "Opposition fighters took over {town} in {district} after attacking regime positions at dawn.",
    "Islamic State militants captured {town} from government forces near {district}; casualties unknown.",
]


def make_events(n: int = 100, seed: int = 0, planted_share: float = 0.8) -> pd.DataFrame:
    """Synthetic two-class event table; 'regains control' is planted only in government rows."""
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n):
        gov = i % 2 == 0
        town = TOWNS[rng.integers(len(TOWNS))]
        district = DISTRICTS[rng.integers(len(DISTRICTS))]
        if gov:
            template = GOV_NOTES[rng.integers(2)] if rng.random() < planted_share else GOV_OTHER
        else:
            template = NSA_NOTES[rng.integers(2)]
        rows.append({
            "id": 1000 + i,
            "event_date": pd.Timestamp("2017-01-01") + pd.Timedelta(days=int(rng.integers(0, 5 * 365))),
            "actor1": "Military Forces of Syria (2000-)" if gov else "HTS: Hayat Tahrir al Sham",
            "admin1": "Idleb",
            "admin2": district,
            "event_type": "Strategic developments" if gov else "Battles",
            "sub_event_type": GOV if gov else NSA,
            "fatalities": int(rng.integers(0, 12)),
            "notes": template.format(town=town, district=district),
        })
    return pd.DataFrame(rows)


def make_separable_events(n: int = 200, seed: int = 1) -> pd.DataFrame:
    """Events whose notes differ between classes only by the word 'recaptured'."""
    rng = np.random.default_rng(seed)
    filler = ["village", "hills", "road", "checkpoint", "district", "outskirts", "airbase", "bridge",
              "farms", "factory", "ridge", "camp"]
    base = make_events(n=n, seed=seed)
    notes = []
    for label in base["sub_event_type"]:
        words = list(rng.choice(filler, size=6, replace=True))
        if label == GOV:
            words.insert(int(rng.integers(0, 6)), "recaptured")
        notes.append(" ".join(words))
    return base.assign(notes=notes, admin2=rng.choice(DISTRICTS, size=n))


def write_raw_csv(df: pd.DataFrame, path, extra_rows: int = 10) -> str:
    """Write an ACLED-style export: `data_id` key, upper-case headers, plus unrelated sub-event rows."""
    raw = df.rename(columns={"id": "data_id"})
    if extra_rows:
        other = raw.head(extra_rows).assign(
            data_id=lambda x: x["data_id"] + 100000,
            sub_event_type="Armed clash",
        )
        raw = pd.concat([raw, other], ignore_index=True)
    raw.columns = [c.upper() for c in raw.columns]
    raw.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def events():
    return make_events()


@pytest.fixture
def separable_events():
    return make_separable_events()


@pytest.fixture
def raw_csv(tmp_path, events):
    return write_raw_csv(events, tmp_path / "acled_syria.csv")
