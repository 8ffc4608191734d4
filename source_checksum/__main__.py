from source_checksum.cli import main

if __name__ == "__main__":
    main()
