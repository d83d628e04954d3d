import logging

logger = logging.getLogger(__name__)

PAGE_LIMIT = 20


def should_continue(page_count, has_next, page_limit=PAGE_LIMIT):
    """A further page is requested only after a full page that says hasNext."""
    return page_count == page_limit and bool(has_next)


def fetch_all_patients(client, page_limit=PAGE_LIMIT):
    """Download every patient record, one page at a time, in server order.

    A response without a `data` list ends the download; it is not an error.
    """
    patients = []
    page = 1
    logger.info("Starting patient data download...")

    while True:
        data = client.get_json("/patients", params={"page": page, "limit": page_limit})
        records = data.get("data") if isinstance(data, dict) else None
        if not isinstance(records, list):
            logger.info(f"Page {page} carried no record list, stopping")
            break

        patients.extend(records)
        logger.info(f"Fetched page {page} ({len(records)} records). Total so far: {len(patients)}")

        pagination = data.get("pagination") or {}
        has_next = pagination.get("hasNext") if isinstance(pagination, dict) else False
        if not should_continue(len(records), has_next, page_limit):
            break
        page += 1

    logger.info(f"Download complete: {len(patients)} patients")
    return patients
