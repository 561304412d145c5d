#!/usr/bin/env python3
"""Sample dataset generation for manual runs and timing checks.

Writes a data workbook and a matching docx template:
- Row 1: header row (ParticipantId, FirstName, LastName, City, Score, Enrolled)
- Row 2+: data rows; every 10th row has an empty ParticipantId to exercise
  the blank-key skip

    python scripts/gen_sample_dataset.py sample/ --rows 200
    docxgen -t sample/template.docx -d sample/data.xlsx -c ParticipantId -o sample/out -v
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd
from docx import Document

FIRST_NAMES = ["Ann", "Ben", "Chloe", "David", "Emma", "Felix", "Grace", "Hugo"]
LAST_NAMES = ["Smith", "Jones", "Brown", "Taylor", "Wilson", "Evans"]
CITIES = ["Tokyo", "Osaka", "Berlin", "Zurich", "Lyon", "Leeds"]


def generate_rows(rows: int, seed: int = 42) -> pd.DataFrame:
    """Generate participant rows with mixed value types."""
    rng = np.random.default_rng(seed)
    ids = [f"P{i:05d}" if i % 10 else "" for i in range(1, rows + 1)]
    return pd.DataFrame(
        {
            "ParticipantId": ids,
            "FirstName": rng.choice(FIRST_NAMES, rows).tolist(),
            "LastName": rng.choice(LAST_NAMES, rows).tolist(),
            "City": rng.choice(CITIES, rows).tolist(),
            "Score": np.round(rng.uniform(0, 100, rows), 2).tolist(),
            "Enrolled": pd.date_range("2024-01-01", periods=rows, freq="D").date.tolist(),
        }
    )


def create_workbook(output_path: Path, rows: int, sheet: str = "Participants", seed: int = 42) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = generate_rows(rows, seed)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet, index=False)
    print(f"Created workbook: {output_path} ({rows} rows, sheet '{sheet}')")


def create_template(output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc = Document()
    doc.add_heading("Participant {{ ParticipantId }}", level=1)
    doc.add_paragraph("Name: {{ FirstName }} {{ LastName }}")
    doc.add_paragraph("City: {{ City }}")
    doc.add_paragraph("Score: {{ Score }} / enrolled {{ Enrolled }}")
    doc.save(str(output_path))
    print(f"Created template: {output_path}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a sample workbook and docx template")
    parser.add_argument("output_dir", type=Path, help="Directory for data.xlsx and template.docx")
    parser.add_argument("--rows", type=int, default=100, help="Number of data rows (default: 100)")
    parser.add_argument("--sheet", default="Participants", help="Sheet name (default: Participants)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        create_workbook(args.output_dir / "data.xlsx", args.rows, args.sheet, args.seed)
        create_template(args.output_dir / "template.docx")
    except OSError as e:
        print(f"Error generating dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
