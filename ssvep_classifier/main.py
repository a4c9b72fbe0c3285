#!/usr/bin/env python3
"""
SSVEP Classifier Main Entry Point

Runs online SSVEP trials against a synthetic or BrainFlow sample stream:
    python -m ssvep_classifier.main                        # synthetic 15 Hz
    python -m ssvep_classifier.main --target 16 --trials 3
    python -m ssvep_classifier.main --board 0 --port COM3  # OpenBCI Cyton
"""

import argparse
import logging
import sys
import time

from .classifier import SsvepClassifier
from .clock import LslClock, MonotonicClock
from .config import BandpassFilter, ClassifierConfig, SubBandMixingParams
from .drivers import BrainFlowStreamer, SyntheticSsvepStreamer


def build_config(args) -> ClassifierConfig:
    """Configuration from a JSON file (if given) overridden by CLI options."""
    config = ClassifierConfig.load(args.config) if args.config else ClassifierConfig()

    if args.frequencies:
        config.patterns = tuple(args.frequencies)
    if args.channels:
        config.channels = list(args.channels)
    if args.sampling_rate is not None:
        config.sampling_rate = args.sampling_rate
    if args.trial_ms is not None:
        config.trial_duration_ms = args.trial_ms
    if args.delay_ms is not None:
        config.ssvep_delay_ms = args.delay_ms
    if args.harmonics is not None:
        config.harmonics_count = args.harmonics
    if args.threshold is not None:
        config.threshold = args.threshold
    if args.filter_bank:
        config.filter_bank = tuple(BandpassFilter.parse(f) for f in args.filter_bank)
    if args.mixing:
        config.sub_band_mixing = SubBandMixingParams(*args.mixing)
    if args.parallel is not None:
        config.parallelism = args.parallel
    if args.baseline > 0:
        config.baseline_enabled = True
    return config


def create_streamer(args, config: ClassifierConfig):
    if args.board is not None:
        streamer = BrainFlowStreamer(board_id=args.board, serial_port=args.port)
        if not streamer.connect():
            return None
        if streamer.sampling_rate != config.sampling_rate:
            print(f"WARNING: board samples at {streamer.sampling_rate} Hz, "
                  f"configuration expects {config.sampling_rate} Hz")
        return streamer
    return SyntheticSsvepStreamer(
        n_channels=max(config.channels) + 1,
        sampling_rate=config.sampling_rate,
        target_frequency=args.target,
        noise=args.noise,
    )


def run(args) -> int:
    config = build_config(args)
    streamer = create_streamer(args, config)
    if streamer is None:
        print("ERROR: Failed to connect to EEG board")
        return 1

    print("\n" + "=" * 60)
    print("SSVEP Classifier")
    print("=" * 60)
    print(f"  Targets: {', '.join(str(p) for p in config.stimulation_patterns)}")
    print(f"  Window: {config.trial_duration_ms:.0f} ms ({config.window_size} samples)")
    print(f"  Channels: {config.channels}")

    hits = 0
    clock = LslClock() if args.lsl_clock else MonotonicClock()
    with SsvepClassifier(config, clock=clock) as classifier:
        streamer.attach(classifier)
        streamer.start()
        try:
            if args.baseline > 0:
                sink = classifier.create_calibration_sink()
                print(f"\nBaseline: {args.baseline:.1f} s")
                streamer.attach(sink)
                time.sleep(args.baseline)
                streamer.detach(sink)
                sink.initialize()
                print(f"  Predictor: {classifier.predictor!r}")

            for trial in range(1, args.trials + 1):
                classifier.activate(True)
                result = classifier.classify()
                classifier.activate(False)

                label = (config.get_frequency_label(result.class_index)
                         if result.is_success else result.state.value.upper())
                print(f"Trial {trial}: {label}")
                if result.is_success and args.board is None and args.target is not None:
                    if abs(config.frequencies[result.class_index] - args.target) < 0.01:
                        hits += 1
        except KeyboardInterrupt:
            print("\nInterrupted")
        finally:
            streamer.stop()
            if isinstance(streamer, BrainFlowStreamer):
                streamer.disconnect()

    if args.board is None and args.target is not None:
        print(f"\nAccuracy: {hits}/{args.trials}")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Real-time SSVEP stimulus classifier",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ssvep_classifier.main                          # synthetic 15 Hz
  python -m ssvep_classifier.main --target 17 --noise 20
  python -m ssvep_classifier.main --filter-bank 6-90 14-90 22-90
  python -m ssvep_classifier.main --board 0 --port COM3    # OpenBCI Cyton
        """
    )

    parser.add_argument('--config', '-c', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--frequencies', '-f', type=str, nargs='+', default=None,
                        help='Stimulation patterns, e.g. 14 15 16 17 or 15@0.5')
    parser.add_argument('--channels', type=int, nargs='+', default=None,
                        help='Channel indices (0-based)')
    parser.add_argument('--sampling-rate', type=float, default=None,
                        help='Sampling rate (Hz)')
    parser.add_argument('--trial-ms', type=float, default=None,
                        help='Trial duration (ms)')
    parser.add_argument('--delay-ms', type=float, default=None,
                        help='SSVEP onset delay (ms)')
    parser.add_argument('--harmonics', type=int, default=None,
                        help='Harmonics per reference')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Decision threshold')
    parser.add_argument('--filter-bank', type=str, nargs='+', default=None,
                        help='Sub-bands as low-high, e.g. 6-90 14-90')
    parser.add_argument('--mixing', type=float, nargs=2, default=None,
                        metavar=('A', 'B'), help='Sub-band weight n^-A + B')
    parser.add_argument('--parallel', type=int, default=None,
                        help='Worker count (0 = CPU count)')
    parser.add_argument('--trials', '-n', type=int, default=5,
                        help='Number of trials')
    parser.add_argument('--baseline', type=float, default=0.0,
                        help='Baseline duration in seconds (0 = skip)')
    parser.add_argument('--target', '-t', type=float, default=15.0,
                        help='Target frequency for synthetic data')
    parser.add_argument('--noise', type=float, default=5.0,
                        help='Noise amplitude for synthetic data')
    parser.add_argument('--board', type=int, default=None,
                        help='BrainFlow board id (e.g. 0 = Cyton, -1 = synthetic)')
    parser.add_argument('--port', '-p', type=str, default=None,
                        help='Serial port for the board (e.g., COM3)')
    parser.add_argument('--lsl-clock', action='store_true',
                        help='Time trials with the LSL local clock')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
