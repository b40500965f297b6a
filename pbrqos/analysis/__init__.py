"""Flow statistics analysis modules."""
from .flow_key import FlowRecord, FlowKeyExtractor
from .metrics import ClassSummary, aggregate, observation_window
from .flow_records import load_flow_records, save_flow_records
from .export import save_summary_txt, save_summary_csv, print_summary
