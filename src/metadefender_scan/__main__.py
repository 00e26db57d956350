from metadefender_scan.cli import main

main()
