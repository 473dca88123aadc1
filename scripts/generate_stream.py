"""Write a synthetic noisy orientation stream to CSV.

Usage:
    python scripts/generate_stream.py --output data/synthetic.csv --duration 20 --rate 90 --jitter 0.3
"""

import argparse
from quat_smoothing.data.streams import generate_noisy_stream, save_stream_csv


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic orientation stream")
    parser.add_argument("--output", required=True, help="Output CSV path")
    parser.add_argument("--duration", type=float, default=10.0)
    parser.add_argument("--rate", type=float, default=60.0)
    parser.add_argument("--noise-std", type=float, default=0.05)
    parser.add_argument("--drift-rate", type=float, default=0.3)
    parser.add_argument("--jitter", type=float, default=0.0)
    parser.add_argument("--no-sign-flips", action="store_true")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    stream = generate_noisy_stream(
        duration=args.duration,
        rate=args.rate,
        noise_std=args.noise_std,
        drift_rate=args.drift_rate,
        jitter=args.jitter,
        sign_flips=not args.no_sign_flips,
        seed=args.seed,
    )
    save_stream_csv(stream, args.output)
    print(f"Saved {len(stream)} samples to {args.output}")


if __name__ == "__main__":
    main()
