from .account import (
    perform_check_credits_call,
    perform_credit_forecast_call,
    perform_credit_usage_call,
    sanitize_account_info,
    summarize_account_info,
)
from .api import DWSClient
from .directory_tree import build_directory_tree, perform_directory_tree_call
from .dispatch import (
    OutboundRequest,
    plan_ai_redact_request,
    plan_build_request,
    plan_sign_request,
    send_request,
)
from .operations import perform_ai_redact_call, perform_build_call, perform_sign_call
from .references import (
    FileReference,
    ReferenceMap,
    collect_file_references,
    is_remote_url,
    load_file_reference,
    reference_key,
)
from .responses import error_result, materialize_file, materialize_json_content
from .sandbox import Sandbox

__all__ = [
    "DWSClient",
    "FileReference",
    "OutboundRequest",
    "ReferenceMap",
    "Sandbox",
    "build_directory_tree",
    "collect_file_references",
    "error_result",
    "is_remote_url",
    "load_file_reference",
    "materialize_file",
    "materialize_json_content",
    "perform_ai_redact_call",
    "perform_build_call",
    "perform_check_credits_call",
    "perform_credit_forecast_call",
    "perform_credit_usage_call",
    "perform_directory_tree_call",
    "perform_sign_call",
    "plan_ai_redact_request",
    "plan_build_request",
    "plan_sign_request",
    "reference_key",
    "sanitize_account_info",
    "send_request",
    "summarize_account_info",
]
