from kms_cli.cli import kms_cli


def main():
    kms_cli(prog_name="kms-cli")


if __name__ == "__main__":
    main()
