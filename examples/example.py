#!/usr/bin/env python

from pprint import pprint

from know_your_route import (
    classify_hop_output,
    diagnose_path,
    discover_hops,
    load_config,
    run_cycles,
)

if __name__ == "__main__":
    # load configuration from file (default: 'know_your_route.toml')
    config = load_config()

    # target IP
    ip = "8.8.8.8"

    # Classify a single probe reply
    print("Classifier...")
    result = classify_hop_output("From 10.0.0.1 icmp_seq=1 Time to live exceeded", ip)
    pprint(result)

    # Hop discovery only
    print("Discovery...")
    hops = discover_hops(ip, config=config)
    pprint(hops)

    # Statistics over the discovered hops
    print("Statistics...")
    reports = run_cycles(hops, 3, on_cycle=lambda s: print(f"cycle {s.cycle}/{s.total_cycles}"), config=config)
    pprint(reports)

    # Both at once, destination guaranteed last
    print("Diagnosis...")
    result = diagnose_path(ip, 5, lambda s: print(f"cycle {s.cycle}/{s.total_cycles}"), config=config)
    pprint(result.model_dump())
