import os

import pandas as pd

# option key -> (csv file, columns served to the form)
FORM_OPTION_FILES = {
    "goals": ("goals.csv", ["label"]),
    "backgrounds": ("backgrounds.csv", ["id", "label"]),
    "time_options": ("time_options.csv", ["id", "label"]),
    "difficulties": ("difficulties.csv", ["id", "label"]),
}


def _read_options(path: str, columns: list[str]) -> pd.DataFrame:
    # dtype=str keeps ids like "1-2" and "4+" verbatim.
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{os.path.basename(path)} is missing column(s): {missing}")
    df = df[columns].apply(lambda col: col.str.strip())
    return df[df["label"] != ""]


def load_form_options(data_path: str) -> dict:
    """
    Load the static input-form enumerations from data_path/*.csv.
    Raises on missing files or columns.

    Returns:
      {
        "goals":        ["Prepare for Final Exams", ...],
        "backgrounds":  [{"id": "beginner", "label": "Beginner"}, ...],
        "time_options": [{"id": "1-2", "label": "1-2 hours/day"}, ...],
        "difficulties": [{"id": "easy", "label": "Easy"}, ...],
      }
    """
    options = {}
    for key, (filename, columns) in FORM_OPTION_FILES.items():
        df = _read_options(os.path.join(data_path, filename), columns)
        if columns == ["label"]:
            options[key] = df["label"].tolist()
        else:
            options[key] = df.to_dict(orient="records")
        if not options[key]:
            print(f"[WARN] {filename} has no rows")
    return options
