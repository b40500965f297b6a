#!/usr/bin/env python3
"""
Export Functions

Functions for rendering a per-class summary to console, text and CSV.
"""

import csv

from ..qos.classifier import TrafficClass

# Expected outcome under congestion, shown next to each metric
EXPECTATIONS = {
    TrafficClass.PRIORITY_HIGH: {
        'loss': 'Near 0%',
        'delay': 'Low',
        'jitter': 'Low',
        'throughput': 'Unaffected',
    },
    TrafficClass.PRIORITY_LOW: {
        'loss': 'High',
        'delay': 'High',
        'jitter': 'High',
        'throughput': 'Bottlenecked',
    },
}


def format_summary(summary, show_expected=True):
    """
    Format a summary mapping as report lines.

    Args:
        summary: {TrafficClass: ClassSummary} from aggregate()
        show_expected: Append "[Expected: ...]" hints

    Returns:
        list: Lines of text (without newlines)
    """
    lines = ["=" * 70, " " * 16 + "QoS PERFORMANCE VERIFICATION", "=" * 70, ""]

    if not summary:
        lines.append("No measurement traffic delivered.")
        lines.append("")
        return lines

    for traffic_class in TrafficClass:
        s = summary.get(traffic_class)
        if s is None:
            continue
        expected = EXPECTATIONS.get(traffic_class, {}) if show_expected else {}

        def hint(key):
            return f" [Expected: {expected[key]}]" if key in expected else ""

        lines.append(f"{traffic_class.value.upper()} ({traffic_class.label}):")
        lines.append(f"  Sent              : {s.tx_packets} packets")
        lines.append(f"  Received          : {s.rx_packets} packets")
        lines.append(f"  Packet Loss       : {s.loss_percent:.2f} %{hint('loss')}")
        lines.append(f"  Avg Latency       : {s.avg_delay_ms:.2f} ms{hint('delay')}")
        if s.avg_jitter_ms is not None:
            lines.append(f"  Avg Jitter        : {s.avg_jitter_ms:.2f} ms{hint('jitter')}")
        lines.append(f"  Throughput        : {s.throughput_mbps:.2f} Mbps{hint('throughput')}")
        lines.append("")

    return lines


def print_summary(summary, show_expected=True):
    """
    Print summary to console.

    Args:
        summary: {TrafficClass: ClassSummary} from aggregate()
    """
    print("\n" + "\n".join(format_summary(summary, show_expected)))


def save_summary_txt(summary, output_file, show_expected=True):
    """
    Save summary to text file.

    Args:
        summary: {TrafficClass: ClassSummary} from aggregate()
        output_file: Output file path
    """
    with open(output_file, 'w') as f:
        f.write("\n".join(format_summary(summary, show_expected)) + "\n")

    print(f"Summary saved to: {output_file}")


def save_summary_csv(summary, output_file):
    """
    Save summary to CSV file (Excel-compatible).

    One row per reported class; jitter is empty where it is not tracked.
    """
    with open(output_file, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow([
            'Class', 'Sent', 'Received', 'Loss (%)',
            'Avg Delay (ms)', 'Avg Jitter (ms)', 'Throughput (Mbps)',
        ])

        for traffic_class in TrafficClass:
            s = summary.get(traffic_class)
            if s is None:
                continue
            writer.writerow([
                traffic_class.value,
                s.tx_packets,
                s.rx_packets,
                f"{s.loss_percent:.2f}",
                f"{s.avg_delay_ms:.2f}",
                '' if s.avg_jitter_ms is None else f"{s.avg_jitter_ms:.2f}",
                f"{s.throughput_mbps:.2f}",
            ])

    print(f"CSV saved to: {output_file}")
