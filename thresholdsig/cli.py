import argparse
import logging
import random
import sys
import time

from .keygen import generate
from .session import SigningSession, authorization_message, next_session_id
from .curve import point_to_bytes
from .verifier import verify as verify_signature


def demo(args):
    """Run one full session in process: generate, commit, sign, combine, verify."""
    key_shares = generate(args.participants, args.threshold)
    signers = sorted(random.sample(range(1, args.participants + 1), args.threshold))
    session_id = next_session_id()
    message = authorization_message(args.resource, args.principal, args.action, session_id, time.time())

    session = SigningSession(key_shares.public_shares, key_shares.group_public_key,
                             key_shares.threshold, signers, message, session_id=session_id)
    shares = {s.index: s for s in key_shares.shares}
    commitments = {i: session.commit(shares[i]) for i in signers}
    for i in signers:
        session.sign(shares[i], commitments[i])
    signature = session.aggregate()
    valid = session.verify()

    print(f"participants signing = {signers}")
    print(f"public_key = [{point_to_bytes(key_shares.group_public_key).hex().upper()}]")
    print(f"message = [{message.hex().upper()}]")
    print(f"signature = [{signature}]")
    print(f"verified = {valid}")
    return 0 if valid else 1


def verify(args):
    try:
        message = bytes.fromhex(args.message)
    except ValueError:
        print("Message must be hex encoded", file=sys.stderr)
        return 2
    valid = verify_signature(message, args.signature, args.public_key)
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def main(argv=None):
    parser = argparse.ArgumentParser(prog="thresholdsig")
    parser.add_argument("--log-level", default="WARNING", help="Logging level.")
    subparsers = parser.add_subparsers()

    parser_demo = subparsers.add_parser("demo", help="Run a threshold signing session.")
    parser_demo.add_argument("-n", "--participants", type=int, default=5, help="Group size.")
    parser_demo.add_argument("-t", "--threshold", type=int, default=3, help="Signers required.")
    parser_demo.add_argument("--resource", default="arn:aws:s3:::example-bucket", help="Resource identifier.")
    parser_demo.add_argument("--principal", default="alice", help="Principal identifier.")
    parser_demo.add_argument("--action", default="s3:GetObject", help="Requested action.")
    parser_demo.set_defaults(func=demo)

    parser_verify = subparsers.add_parser("verify", help="Verify a signature.")
    parser_verify.add_argument("--public-key", type=str, required=True, help="Group public key, hex x || y.")
    parser_verify.add_argument("--message", type=str, required=True, help="Signed message, hex.")
    parser_verify.add_argument("--signature", type=str, required=True, help="Signature, hex r || s || v.")
    parser_verify.set_defaults(func=verify)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
