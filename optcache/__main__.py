from optcache.cli import main

main()
