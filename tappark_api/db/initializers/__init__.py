from tappark_api.db.initializers.parking_initializer import initialize_parking_layout


def run_all_initializers():
    initialize_parking_layout()
