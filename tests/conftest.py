import json
import zipfile
from pathlib import Path
from typing import Dict, List

import pytest

VERSION = "20250407"

ENTITY_FILES = {
    "SUBS": f"SUBS{VERSION}.xls",
    "VTM": f"VTM{VERSION}.xls",
    "GP": f"GP{VERSION}.xls",
    "GPU": f"GPU{VERSION}.xls",
    "GPP": f"GPP{VERSION}.xls",
    "TP": f"TP{VERSION}.xls",
    "TPP": f"TPP{VERSION}.xls",
}
SNAPSHOT_FILE = f"TMTRF{VERSION}_SNAPSHOT.xls"

RELATIONSHIP_FILES = {
    "substovtm": f"SUBStoVTM{VERSION}.xls",
    "vtmtogp": f"VTMtoGP{VERSION}.xls",
    "gptotp": f"GPtoTP{VERSION}.xls",
    "gptogpu": f"GPtoGPU{VERSION}.xls",
    "gputotpu": f"GPUtoTPU{VERSION}.xls",
    "gputogpp": f"GPUtoGPP{VERSION}.xls",
    "gpptogpp": f"GPPtoGPP{VERSION}.xls",
    "gpptotpp": f"GPPtoTPP{VERSION}.xls",
    "tptotpu": f"TPtoTPU{VERSION}.xls",
    "tputotpp": f"TPUtoTPP{VERSION}.xls",
    "tpptotpp": f"TPPtoTPP{VERSION}.xls",
}

# --- A small but complete substance -> pack hierarchy ---
# One chain per level, plus self-referencing rows in both pack-to-pack files.

SAMPLE_TABLES: Dict[str, List[list]] = {
    ENTITY_FILES["SUBS"]: [["TMTID(SUBS)", "FSN"], ["S1", "paracetamol"]],
    ENTITY_FILES["VTM"]: [["TMTID(VTM)", "FSN"], ["V1", "paracetamol (VTM)"]],
    ENTITY_FILES["GP"]: [["TMTID(GP)", "FSN"], ["G1", "paracetamol 500 mg tablet"]],
    ENTITY_FILES["GPU"]: [["TMTID(GPU)", "FSN"], ["GU1", "paracetamol 500 mg tablet, 1 tablet"]],
    ENTITY_FILES["GPP"]: [
        ["TMTID(GPP)", "FSN"],
        ["GP1", "paracetamol 500 mg tablet, 10 tablets"],
        ["GP2", "paracetamol 500 mg tablet, 100 tablets"],
    ],
    ENTITY_FILES["TP"]: [["TMTID(TP)", "FSN"], ["T1", "TYLENOL (paracetamol 500 mg) tablet"]],
    SNAPSHOT_FILE: [["TMTID(TPU)", "FSN"], ["TU1", "TYLENOL tablet, 1 tablet"]],
    ENTITY_FILES["TPP"]: [
        ["TMTID(TPP)", "FSN"],
        ["TP1", "TYLENOL tablet, 10 tablets"],
        ["TP2", "TYLENOL tablet, 100 tablets"],
    ],
    RELATIONSHIP_FILES["substovtm"]: [["S1", "V1"]],
    RELATIONSHIP_FILES["vtmtogp"]: [["V1", "G1"]],
    RELATIONSHIP_FILES["gptotp"]: [["G1", "T1"]],
    RELATIONSHIP_FILES["gptogpu"]: [["G1", "GU1"]],
    RELATIONSHIP_FILES["gputotpu"]: [["GU1", "TU1"]],
    RELATIONSHIP_FILES["gputogpp"]: [["GU1", "GP1"]],
    RELATIONSHIP_FILES["gpptogpp"]: [["GP1", "GP2"], ["GP2", "GP2"]],
    RELATIONSHIP_FILES["gpptotpp"]: [["GP1", "TP1"]],
    RELATIONSHIP_FILES["tptotpu"]: [["T1", "TU1"]],
    RELATIONSHIP_FILES["tputotpp"]: [["TU1", "TP1"]],
    RELATIONSHIP_FILES["tpptotpp"]: [["TP1", "TP2"], ["TP2", "TP2"]],
}

TEMPLATE = {
    "resourceType": "CodeSystem",
    "url": "https://terms.example.org/fhir/CodeSystem/tmt",
    "version": "",
    "name": "TMT",
    "title": "",
    "status": "active",
    "date": "",
    "filter": [{"code": "class", "operator": ["="], "value": "TMT entity class"}],
    "property": [
        {"code": "class", "type": "code"},
        {"code": "status", "type": "code"},
        {"code": "abstract", "type": "boolean"},
        {"code": "parent", "type": "code"},
        {"code": "child", "type": "code"},
    ],
    "concept": [{"code": "TEMPLATE", "display": "Template concept"}],
}


class TableReader:
    """Stands in for the spreadsheet decoder: rows are looked up by file name."""

    def __init__(self, tables: Dict[str, List[list]]):
        self.tables = tables
        self.calls: List[str] = []

    def __call__(self, path: Path) -> List[list]:
        self.calls.append(path.name)
        return [list(row) for row in self.tables.get(path.name, [])]


def create_release_tree(root: Path, skip: tuple = ()) -> Path:
    """
    Lays out an extracted TMT release with empty placeholder files.
    Names listed in skip are left out so lookups can fail.
    """
    tmt_dir = root / f"TMTRF{VERSION}"
    bonus_dir = root / f"TMTRF{VERSION}_BONUS"
    (bonus_dir / "Concept").mkdir(parents=True, exist_ok=True)
    (bonus_dir / "Relationship").mkdir(parents=True, exist_ok=True)
    tmt_dir.mkdir(parents=True, exist_ok=True)

    if SNAPSHOT_FILE not in skip:
        (tmt_dir / SNAPSHOT_FILE).write_bytes(b"")
    for name in ENTITY_FILES.values():
        if name not in skip:
            (bonus_dir / "Concept" / name).write_bytes(b"")
    for name in RELATIONSHIP_FILES.values():
        if name not in skip:
            (bonus_dir / "Relationship" / name).write_bytes(b"")
    return root


@pytest.fixture
def release_tree(tmp_path) -> Path:
    """An extracted release directory with every required file present."""
    return create_release_tree(tmp_path / "extracted")


@pytest.fixture
def tmt_dirs(release_tree):
    return release_tree / f"TMTRF{VERSION}", release_tree / f"TMTRF{VERSION}_BONUS"


@pytest.fixture
def sample_reader() -> TableReader:
    return TableReader(SAMPLE_TABLES)


@pytest.fixture
def input_dir(tmp_path) -> Path:
    """An input directory holding a release archive and the CodeSystem template."""
    directory = tmp_path / "input"
    directory.mkdir()
    source = create_release_tree(tmp_path / "release_src")

    with zipfile.ZipFile(directory / f"TMTRF{VERSION}.zip", "w") as zip_file:
        for path in sorted(source.rglob("*")):
            if path.is_file():
                zip_file.write(path, path.relative_to(source).as_posix())

    (directory / "TMT-CS-template.json").write_text(json.dumps(TEMPLATE), encoding="utf-8")
    return directory
