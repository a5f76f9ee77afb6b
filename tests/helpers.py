import pandas as pd

from wastedash.data import RAW_COLUMNS, normalize_records


def raw_frame(rows):
    """All-text frame shaped like a parsed CSV; missing cells are empty."""
    return pd.DataFrame(rows, columns=list(RAW_COLUMNS)).fillna("").astype(str)


def csv_text(rows):
    return raw_frame(rows).to_csv(index=False)


def records(rows):
    out, _ = normalize_records(raw_frame(rows))
    return out


def row(year, category, weight, vendor="Acme Hauling", material="Paper", cost="$10.00"):
    return {
        "Year": str(year),
        "Month": "January",
        "Day": "1",
        "Category": category,
        "Material Type": material,
        "Weight (lbs)": str(weight),
        "Vendor": vendor,
        "Date Updated": "2023-01-05",
        "Cost": cost,
        "Notes": "",
    }
