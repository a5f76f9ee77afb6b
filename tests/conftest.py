import pytest

from tests.helpers import csv_text, row


@pytest.fixture
def sample_rows():
    return [
        row(2021, "Recycle", "1,200", vendor="Green Co", material="Paper"),
        row(2019, "Landfill", 300, vendor="Waste Inc", material="Mixed"),
        row(2021, "Compost", 150, vendor="", material="Food"),
        row(2020, "Recycle", 400, vendor="$1,234.56", material="Plastic"),
        row(2019, "Recycle", 100, vendor="Green Co", material="Paper"),
        row("abc", "Landfill", 999, vendor="Waste Inc", material="Mixed"),
    ]


@pytest.fixture
def write_csv(tmp_path):
    def _write(rows, name="cleaned_wastedata_final.csv"):
        path = tmp_path / name
        path.write_text(csv_text(rows), encoding="utf-8")
        return path

    return _write
