from gpxtrend.run import main

main()
