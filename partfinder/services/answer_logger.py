"""
Answer Logger - Keep a JSON record of each generated answer in ANSWER_LOG_DIR
"""
import json
import logging
import os
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def log_answer(
    log_dir: Optional[str],
    kind: str,
    parts: List[str],
    markdown: str,
    context: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Write one generated answer to a .json file.

    Args:
        log_dir: Target directory; logging is skipped when empty
        kind: "alternatives" or "comparison"
        parts: Part number(s) the answer is about
        markdown: Generated markdown
        context: Aggregated context the prompt was built from

    Returns:
        Path to the created log file, or "" when nothing was written
    """
    if not log_dir:
        return ""

    try:
        os.makedirs(log_dir, exist_ok=True)

        now = datetime.now()
        filename = f"{kind}_{now.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}.json"
        log_path = os.path.join(log_dir, filename)

        log_data = {
            "metadata": {
                "kind": kind,
                "parts": list(parts),
                "generated": now.isoformat(),
            },
            "context": context,
            "markdown": markdown,
        }

        with open(log_path, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)

        return log_path

    except (OSError, TypeError, ValueError) as e:
        # Never fail the request over the answer log
        logger.warning("Error writing answer log: %s", e)
        return ""
