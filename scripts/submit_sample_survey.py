#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import httpx

sys.path.append(str(Path(__file__).resolve().parents[1]))

from chatpanel.core.normalize import build_survey_record, render_survey_summary
from chatpanel.infrastructure.submissions import SURVEY_PATH

SAMPLE_FORM = {
    "q1": "combination",
    "q2": "acne",
    "q3": "dark-spots",
    "q4_fragrance": True,
    "q4_nuts": False,
    "q5": "fragrance_free",
    "q6": "morning-and-night",
    "q7": "moderate",
    "q8": "clear_skin",
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Post a sample skin survey to the submissions API")
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--form", help="JSON file with raw widget form fields (q1..q8, q4_<option>)")
    args = parser.parse_args()

    form = SAMPLE_FORM
    if args.form:
        form = json.loads(Path(args.form).read_text(encoding="utf-8"))

    record = build_survey_record(form)
    response = httpx.post(f"{args.base_url.rstrip('/')}{SURVEY_PATH}", json=record, timeout=10.0)
    print(f"{response.status_code} {response.text}")
    if response.is_success:
        print(render_survey_summary(record))


if __name__ == "__main__":
    main()
