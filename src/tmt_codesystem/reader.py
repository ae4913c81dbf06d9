# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import math
from pathlib import Path
from typing import Any, Callable, List

import pandas as pd

Row = List[Any]
RowReader = Callable[[Path], List[Row]]


def cell_to_str(value: Any) -> str:
    """
    Normalizes a raw spreadsheet cell to the string form used for codes.
    Legacy .xls files store numeric TMT IDs as floats, so 123456.0 -> "123456".
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _trim_row(values: List[Any]) -> Row:
    row = list(values)
    while row and cell_to_str(row[-1]) == "":
        row.pop()
    return row


def read_rows(path: Path) -> List[Row]:
    """
    Reads the first sheet of a spreadsheet as a list of raw rows.
    No header interpretation is done here; trailing empty cells are dropped.
    """
    # The engine follows the suffix: xlrd for .xls, openpyxl for .xlsx.
    df = pd.read_excel(path, sheet_name=0, header=None, dtype=object)
    return [_trim_row(values) for values in df.itertuples(index=False, name=None)]
