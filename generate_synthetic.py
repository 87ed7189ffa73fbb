import os
import random
import argparse

from aligner.synthetic import generate_slider_captcha


def generate_synthetic_data(count=200, output_dir="synthetic_captchas", noise=0.01):
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    print(f"Generating {count} synthetic slider captchas...")

    for i in range(count):
        shift = random.randint(0, 8)
        assets, _ = generate_slider_captcha(shift=shift, slack=8, noise=noise, seed=i)

        # Answer goes in the filename, e.g. 0007_shift5_fg.png
        stem = os.path.join(output_dir, f"{i:04d}_shift{shift}")
        assets.foreground.to_image().save(f"{stem}_fg.png")
        assets.background.to_image().save(f"{stem}_bg.png")

        if (i + 1) % 50 == 0:
            print(f"Generated {i+1}...")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate synthetic slider captchas")
    parser.add_argument("--count", type=int, default=200)
    parser.add_argument("--output-dir", default="synthetic_captchas")
    parser.add_argument("--noise", type=float, default=0.01)
    args = parser.parse_args()

    generate_synthetic_data(args.count, args.output_dir, args.noise)
