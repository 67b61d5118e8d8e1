import json
import argparse
import sys

from tqdm import tqdm
from bson import ObjectId

from coupon_cache import CouponCodePool
from coupon_cache.config import get_client

# Codes are pushed in chunks so one RPUSH never carries an unbounded payload
PUSH_CHUNK_SIZE = 1000


def generate_coupon_codes(num_codes):
    """
    Generates unique coupon codes for one template.

    Args:
        num_codes (int): How many codes to create.

    Returns:
        A list of code strings.
    """
    print(f"Generating {num_codes} coupon codes...")
    return [str(ObjectId()).upper() for _ in tqdm(range(num_codes))]


def push_codes(pool, template_id, codes):
    """Pushes codes into the template's pool and returns the final pool size."""
    size = 0
    for start in tqdm(range(0, len(codes), PUSH_CHUNK_SIZE)):
        size = pool.push(template_id, codes[start:start + PUSH_CHUNK_SIZE])
    return size


def main():
    """Main function to parse arguments and run the generator."""
    parser = argparse.ArgumentParser(
        description="Generate coupon codes for a template and load them into its Redis code pool.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("template_id", type=int, help="The coupon template the codes belong to.")
    parser.add_argument("num_codes", type=int, help="The total number of codes to generate.")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the codes to this JSON file instead of pushing them to Redis."
    )

    if len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args()

    try:
        codes = generate_coupon_codes(args.num_codes)

        if args.output:
            print(f"Writing codes to {args.output}...")
            with open(args.output, 'w') as f:
                json.dump({str(args.template_id): codes}, f, indent=2)
            print(f"\n✅ Successfully wrote {len(codes)} codes to '{args.output}'.")
        else:
            pool = CouponCodePool(get_client())
            size = push_codes(pool, args.template_id, codes)
            print(f"\n✅ Template {args.template_id} pool now holds {size} codes.")

    except Exception as e:
        print(f"\n❌ An error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
    # python resources/generate_coupon_codes.py 1 1000
