"""
amilink command line
====================

Usage:
    amilink encode TEXT [--key KEY]      # Show bits, signal, statistics
    amilink decode LEVEL [LEVEL ...]     # Decode signal levels to text
    amilink listen [--port N]            # Receive messages until interrupted
    amilink send TEXT [--key KEY]        # Compose and send a message
    amilink probe                        # Test whether a receiver is reachable
"""

import argparse
import logging
import sys
import threading

from . import config
from .codec import ami
from .codec import binary
from .codec.ami import InvalidInput, InvalidSignal
from .codec.cipher import CipherError
from .protocol import factory
from .transport import Receiver, Sender, TransportError


def cmd_encode(args, settings):
    message = factory.compose(args.text, key=args.key)

    if message.encrypted_text is not None:
        print("Encrypted: %s" % (message.encrypted_text))

    stats = ami.statistics(message.encoded_signal)

    print("Binary:    %s" % (binary.format_bits(message.binary_string)))
    print("Signal:    %s" % (ami.format_signal(message.encoded_signal)))
    print("Levels:    %d | +V: %d (%.1f%%) | 0V: %d (%.1f%%) | -V: %d (%.1f%%)" % (
        stats['total'],
        stats['positive'], stats['positive_percent'],
        stats['zero'], stats['zero_percent'],
        stats['negative'], stats['negative_percent']))
    return 0


def cmd_decode(args, settings):
    signal = args.levels

    if not ami.validate(signal):
        print("Warning: signal violates the alternation rule at %s" % (ami.violations(signal)), file=sys.stderr)

    bits = ami.decode(signal)
    print("Binary:    %s" % (binary.format_bits(bits)))
    print("Text:      %s" % (binary.bits_to_text(bits)))
    return 0


def cmd_listen(args, settings):

    def received(message):
        try:
            text = factory.recover(message, key=args.key)
        except (InvalidInput, InvalidSignal, CipherError) as e:
            text = '<unreadable: %s>' % (e)

        print("Received:  %s" % (text))
        print("Signal:    %s" % (ami.format_signal(message.encoded_signal)))
        sys.stdout.flush()

    receiver = Receiver(port=args.port, on_message=received, settings=settings)
    receiver.start()

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        receiver.stop()

    return 0


def cmd_send(args, settings):
    message = factory.compose(args.text, key=args.key)

    with Sender(args.address, args.port, settings=settings) as sender:
        future = sender.send(message)
        try:
            result = future.result()
        except (TransportError, ValueError) as e:
            print("Send failed: %s" % (e), file=sys.stderr)
            return 1

    if result.confirmed:
        print("Delivered and acknowledged.")
    else:
        print("Delivered, but not acknowledged.")
    return 0


def cmd_probe(args, settings):
    sender = Sender(args.address, args.port, settings=settings)
    try:
        reachable = sender.test_connection()
    finally:
        sender.close()

    if reachable:
        print("Receiver at %s is reachable." % (sender.endpoint))
        return 0

    print("Receiver at %s is not reachable." % (sender.endpoint))
    return 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog="amilink",
        description="AMI pseudoternary line coding and transport",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    sub = parser.add_subparsers(dest="command")
    sub.required = True

    p = sub.add_parser("encode", help="encode text as an AMI signal")
    p.add_argument("text")
    p.add_argument("--key", help="encrypt with this key first")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("decode", help="decode AMI signal levels")
    p.add_argument("levels", nargs="+", type=int, metavar="LEVEL", help="-1, 0, or 1")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("listen", help="receive messages")
    p.add_argument("--port", type=int)
    p.add_argument("--key", help="decrypt received messages with this key")
    p.set_defaults(func=cmd_listen)

    p = sub.add_parser("send", help="send a message")
    p.add_argument("text")
    p.add_argument("--address")
    p.add_argument("--port", type=int)
    p.add_argument("--key", help="encrypt with this key first")
    p.set_defaults(func=cmd_send)

    p = sub.add_parser("probe", help="test whether a receiver is reachable")
    p.add_argument("--address")
    p.add_argument("--port", type=int)
    p.set_defaults(func=cmd_probe)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = config.get()

    try:
        return args.func(args, settings)
    except (InvalidInput, InvalidSignal, CipherError, TransportError) as e:
        print("Error: %s" % (e), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
