from src.meeting_attendance.meeting_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(threaded=True)
