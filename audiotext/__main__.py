from audiotext.ui.main_window import main

if __name__ == "__main__":
    main()
