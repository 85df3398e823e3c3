from listing_builder.main import main

main()
