"""
Download, score and submit: the three steps of one assessment run.
"""

import json
import logging

from .patients import fetch_all_patients
from .scoring import calculate_score

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 4
SUBMIT_PATH = "/submit-assessment"


def build_results(classifications):
    """Sort classifications into the three submission buckets.

    Input order is kept and duplicate ids are not collapsed. An invalid
    record is never high risk but can still be a fever patient.
    """
    high_risk = []
    fever = []
    data_issues = []

    for c in classifications:
        if c.is_invalid:
            data_issues.append(c.id)
        elif c.total_risk >= HIGH_RISK_THRESHOLD:
            high_risk.append(c.id)

        if c.is_fever:
            fever.append(c.id)

    return {
        "high_risk_patients": high_risk,
        "fever_patients": fever,
        "data_quality_issues": data_issues,
    }


def analyze(patients):
    return build_results(calculate_score(p) for p in patients)


def submit_assessment(client, results):
    return client.post_json(SUBMIT_PATH, results)


def run_assessment(client, dry_run=False):
    """Run one full assessment and return (results, server_response).

    server_response is None on a dry run. ApiError propagates to the caller.
    """
    patients = fetch_all_patients(client)
    results = analyze(patients)

    logger.info("Analysis results:")
    logger.info(f"   High risk:     {len(results['high_risk_patients'])}")
    logger.info(f"   Fever:         {len(results['fever_patients'])}")
    logger.info(f"   Data quality:  {len(results['data_quality_issues'])}")

    if dry_run:
        logger.info("Dry run, not submitting:\n" + json.dumps(results, indent=2))
        return results, None

    logger.info("Submitting results...")
    response = submit_assessment(client, results)
    logger.info("Submission successful:\n" + json.dumps(response, indent=2))
    return results, response
